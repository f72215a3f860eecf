# src/glc/export.py
from __future__ import annotations

import csv
import io
import logging
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Sequence, TextIO

from .config import ENCODING_SJIS, Settings
from .models import Issue, Project

log = logging.getLogger(__name__)

PROJECT_HEADER = ["Id", "Name", "NameWithNamespace", "Path", "PathWithNamespace", "IssuesEnabled", "CreatedAt"]
# "Descrption" bleibt so, bestehende Auswertungen lesen diese Spalte
ISSUE_HEADER = ["Id", "ProjectId", "Title", "Descrption", "Assignee", "Author", "State", "UpdatedAt", "CreatedAt"]

# Python-Codecs zu den CLI-Werten; "sjis" ist Windows-31J (①, ～, Ⅰ usw.)
_CODECS = {ENCODING_SJIS: "cp932", "utf8": "utf-8"}


def _fmt_bool(val: bool) -> str:
    return "true" if val else "false"


def project_row(p: Project) -> List[str]:
    return [
        str(p.id),
        p.name,
        p.name_with_namespace,
        p.path,
        p.path_with_namespace,
        _fmt_bool(p.issues_enabled),
        p.created_at,
    ]


def issue_row(i: Issue) -> List[str]:
    return [
        str(i.id),
        str(i.project_id),
        i.title,
        i.description,
        i.assignee.name,
        i.author.name,
        i.state,
        i.updated_at,
        i.created_at,
    ]


def _write(stream: TextIO, header: Sequence[str], rows: Iterable[List[str]]) -> int:
    writer = csv.writer(stream, lineterminator="\n")
    # einzelnes \r steht nicht im lineterminator und würde sonst nicht gequotet
    cr_writer = csv.writer(stream, lineterminator="\n", quoting=csv.QUOTE_ALL)
    writer.writerow(header)
    count = 0
    for row in rows:
        if any("\r" in field for field in row):
            cr_writer.writerow(row)
        else:
            writer.writerow(row)
        count += 1
    return count


def write_projects(stream: TextIO, projects: Iterable[Project]) -> int:
    """Header + eine Zeile pro Projekt; gibt die Anzahl Datenzeilen zurück."""
    return _write(stream, PROJECT_HEADER, (project_row(p) for p in projects))


def write_issues(stream: TextIO, issues: Iterable[Issue]) -> int:
    return _write(stream, ISSUE_HEADER, (issue_row(i) for i in issues))


@contextmanager
def open_output(path: str, csv_encoding: str) -> Iterator[TextIO]:
    """
    Öffnet das Ziel für den CSV-Writer.
    - leerer Pfad: stdout (Bytes werden umkodiert, stdout selbst bleibt offen)
    - sonst: Datei wird angelegt bzw. abgeschnitten
    Bei sjis werden nicht abbildbare Zeichen durch "?" ersetzt.
    """
    codec = _CODECS.get(csv_encoding, _CODECS[ENCODING_SJIS])
    if not path:
        sys.stdout.flush()
        stream = io.TextIOWrapper(sys.stdout.buffer, encoding=codec, errors="replace", newline="")
        try:
            yield stream
        finally:
            stream.flush()
            stream.detach()
        return

    with open(path, "w", encoding=codec, errors="replace", newline="") as fh:
        yield fh
        fh.flush()


def export(kind: str, records: Sequence, settings: Settings) -> int:
    writers = {"projects": write_projects, "issues": write_issues}
    write = writers[kind]
    with open_output(settings.out, settings.csv_encoding) as stream:
        count = write(stream, records)
    log.info("Export done", extra={"kind": kind, "count": count, "out": settings.out or "<stdout>"})
    return count
