# src/glc/main.py
from __future__ import annotations

import argparse
import logging
import sys

import httpx

from .config import ConfigError, Settings
from .export import export
from .gitlab_api import GitLabClient
from .logging_setup import setup_logging_from_env
from .models import DecodeError, decode_issues, decode_projects

log = logging.getLogger(__name__)

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1

DESCRIPTION = "glc - GitLab command line interface, especially for managing issues."

DECODERS = {"projects": decode_projects, "issues": decode_issues}


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_CODE_ERROR, f"{self.prog}: error: {message}\n")


def fetch(kind: str, settings: Settings) -> str:
    with GitLabClient(settings) as client:
        if kind == "projects":
            return client.get_projects()
        return client.get_issues(project_id=settings.project_id, per_page=settings.per_page)


def cmd_export(args: argparse.Namespace) -> int:
    try:
        settings = Settings.resolve(
            config_path=args.config,
            token=args.token,
            url=args.url,
            out=args.out,
            csv_encoding=args.csv_encoding,
            project_id=getattr(args, "project", None),
            per_page=getattr(args, "per_page", None),
            timeout_s=args.timeout,
        )
    except ConfigError as e:
        print(e, file=sys.stderr)
        args.parser.print_usage(sys.stderr)
        return EXIT_CODE_ERROR

    try:
        body = fetch(args.kind, settings)
    except httpx.HTTPError as e:
        log.error("Request failed", extra={"kind": args.kind, "error": str(e)})
        print(f"error while executing request: {e}", file=sys.stderr)
        return EXIT_CODE_ERROR

    try:
        records = DECODERS[args.kind](body)
    except DecodeError as e:
        print(e, file=sys.stderr)
        print(e.body, file=sys.stderr)
        if args.strict:
            return EXIT_CODE_ERROR
        records = []

    try:
        export(args.kind, records, settings)
    except OSError as e:
        print(f"error while writing CSV: {e}", file=sys.stderr)
        return EXIT_CODE_ERROR
    return EXIT_CODE_OK


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-token", "--token", default="", help="Your private token.")
    common.add_argument("-url", "--url", default="", help="GitLab root URL.")
    common.add_argument("-out", "--out", default="", help="Output CSV file. stdout, wenn leer")
    common.add_argument("-csvEncoding", "--csv-encoding", dest="csv_encoding", default="sjis",
                        help="Output encoding for CSV file: sjis (default) or utf8.")
    common.add_argument("-config", "--config", default=None, help="Config file (default: ~/.glc)")
    common.add_argument("-timeout", "--timeout", type=float, default=None, help="Request timeout in seconds (default: none)")
    common.add_argument("-strict", "--strict", action="store_true", help="Abbrechen, wenn die Antwort kein gültiges JSON ist")

    parser = _Parser(prog="glc", description=DESCRIPTION)
    sub = parser.add_subparsers(dest="cmd", required=True, metavar="command")

    p_proj = sub.add_parser("projects", aliases=["p"], parents=[common], help="get projects")
    p_proj.set_defaults(func=cmd_export, kind="projects", parser=p_proj)

    p_iss = sub.add_parser("issues", aliases=["i"], parents=[common], help="get issues")
    p_iss.add_argument("-project", "--project", default="", help="Target project ID. Optional.")
    p_iss.add_argument("-perPage", "--per-page", dest="per_page", type=int, default=None,
                       help="Number of issues per page (per_page). Optional.")
    p_iss.set_defaults(func=cmd_export, kind="issues", parser=p_iss)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging_from_env()
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
