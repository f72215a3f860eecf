# src/glc/config.py
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
import httpx
from dotenv import dotenv_values

log = logging.getLogger(__name__)

ENCODING_SJIS = "sjis"
ENCODING_UTF8 = "utf8"
CSV_ENCODINGS = (ENCODING_UTF8, ENCODING_SJIS)

TOKEN_HEADER = "PRIVATE-TOKEN"


class ConfigError(RuntimeError):
    """Required setting missing after file, env and flags were merged."""


def default_config_path() -> Path:
    return Path.home() / ".glc"


def read_config_file(path: Optional[str | Path] = None) -> Dict[str, str]:
    """
    Liest eine ``key = value`` Datei (z.B. ~/.glc) in ein Dict.
    Fehlende Datei ist kein Fehler. Zeilen ohne Wert werden verworfen.
    """
    p = Path(path) if path else default_config_path()
    if not p.is_file():
        log.debug("No config file", extra={"path": str(p)})
        return {}
    raw = dotenv_values(p, interpolate=False)
    return {k.strip(): v.strip() for k, v in raw.items() if v is not None}


def normalize_csv_encoding(val: Optional[str]) -> str:
    if not val:
        return ENCODING_SJIS
    v = val.strip().lower()
    if v not in CSV_ENCODINGS:
        log.warning("Unknown CSV encoding %r, falling back to %s", val, ENCODING_SJIS)
        return ENCODING_SJIS
    return v


def _pick(*candidates: Optional[str]) -> str:
    # letzte nicht-leere Quelle gewinnt: file < env < flag
    chosen = ""
    for c in candidates:
        if c:
            chosen = c
    return chosen


@dataclass(frozen=True)
class Settings:
    token: str
    base_url: str
    out: str = ""
    csv_encoding: str = ENCODING_SJIS
    project_id: Optional[str] = None
    per_page: Optional[int] = None
    # None = kein Timeout
    timeout_s: Optional[float] = None

    @classmethod
    def resolve(
        cls,
        *,
        config_path: Optional[str | Path] = None,
        token: Optional[str] = None,
        url: Optional[str] = None,
        out: Optional[str] = None,
        csv_encoding: Optional[str] = None,
        project_id: Optional[str] = None,
        per_page: Optional[int] = None,
        timeout_s: Optional[float] = None,
    ) -> "Settings":
        file_values = read_config_file(config_path)

        resolved_token = _pick(file_values.get("token"), os.getenv("GLC_TOKEN"), token)
        resolved_url = _pick(file_values.get("url"), os.getenv("GLC_URL"), url)

        if not resolved_token:
            raise ConfigError("Private token is required(-token)")
        if not resolved_url:
            raise ConfigError("GitLab URL is required(-url)")

        return cls(
            token=resolved_token,
            base_url=resolved_url.rstrip("/"),
            out=out or "",
            csv_encoding=normalize_csv_encoding(csv_encoding),
            project_id=project_id or None,
            per_page=per_page,
            timeout_s=timeout_s,
        )

    def build_client(self, transport: httpx.BaseTransport | None = None) -> httpx.Client:
        headers = {TOKEN_HEADER: self.token}
        timeout = httpx.Timeout(self.timeout_s)
        return httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
