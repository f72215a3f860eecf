# tests/test_config.py
from __future__ import annotations
import httpx
import pytest
from glc.config import ConfigError, Settings, read_config_file, normalize_csv_encoding, TOKEN_HEADER


@pytest.fixture(autouse=True)
def no_env(monkeypatch):
    monkeypatch.delenv("GLC_TOKEN", raising=False)
    monkeypatch.delenv("GLC_URL", raising=False)


def write_config(tmp_path, text: str):
    p = tmp_path / ".glc"
    p.write_text(text, encoding="utf-8")
    return p


def test_read_config_file_tolerates_whitespace(tmp_path):
    p = write_config(tmp_path, "token = T\n  url=https://gitlab.example.com  \n")
    assert read_config_file(p) == {"token": "T", "url": "https://gitlab.example.com"}


def test_read_config_file_skips_garbage_lines(tmp_path):
    p = write_config(tmp_path, "just some words\ntoken = T\n")
    values = read_config_file(p)
    assert values["token"] == "T"
    assert "just some words" not in values.values()


def test_read_config_file_missing_is_empty(tmp_path):
    assert read_config_file(tmp_path / "nope") == {}


def test_resolve_from_file_only(tmp_path):
    p = write_config(tmp_path, "token = T\nurl = U\n")
    s = Settings.resolve(config_path=p)
    assert s.token == "T"
    assert s.base_url == "U"
    assert s.out == ""
    assert s.project_id is None


def test_flag_overrides_file(tmp_path):
    p = write_config(tmp_path, "token = T\nurl = U\n")
    s = Settings.resolve(config_path=p, token="FLAG", url="https://other")
    assert s.token == "FLAG"
    assert s.base_url == "https://other"


def test_empty_flag_keeps_file_value(tmp_path):
    p = write_config(tmp_path, "token = T\nurl = U\n")
    s = Settings.resolve(config_path=p, token="", url="")
    assert (s.token, s.base_url) == ("T", "U")


def test_env_between_file_and_flag(tmp_path, monkeypatch):
    p = write_config(tmp_path, "token = T\nurl = U\n")
    monkeypatch.setenv("GLC_TOKEN", "ENV")
    assert Settings.resolve(config_path=p).token == "ENV"
    assert Settings.resolve(config_path=p, token="FLAG").token == "FLAG"


@pytest.mark.parametrize("url", ["https://gl.local/", "https://gl.local///", "https://gl.local"])
def test_trailing_slashes_removed(tmp_path, url):
    s = Settings.resolve(config_path=tmp_path / "none", token="t", url=url)
    assert s.base_url == "https://gl.local"


def test_missing_token_raises(tmp_path):
    with pytest.raises(ConfigError, match="token"):
        Settings.resolve(config_path=tmp_path / "none", url="https://gl.local")


def test_missing_url_raises(tmp_path):
    with pytest.raises(ConfigError, match="URL"):
        Settings.resolve(config_path=tmp_path / "none", token="t")


@pytest.mark.parametrize(
    "given, expected",
    [(None, "sjis"), ("", "sjis"), ("utf8", "utf8"), ("UTF8", "utf8"), ("sjis", "sjis"), ("latin1", "sjis")],
)
def test_normalize_csv_encoding(given, expected):
    assert normalize_csv_encoding(given) == expected


def test_build_client_sends_private_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["token"] = request.headers.get(TOKEN_HEADER)
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[])

    s = Settings(token="SECRET", base_url="https://gl.local/gitlab")
    with s.build_client(transport=httpx.MockTransport(handler)) as client:
        client.get("/api/v3/projects")

    assert seen["token"] == "SECRET"
    assert seen["url"] == "https://gl.local/gitlab/api/v3/projects"


def test_resolve_reads_glc_from_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    write_config(tmp_path, "token = HOMETOKEN\nurl = https://gl.home/\n")
    s = Settings.resolve()
    assert s.token == "HOMETOKEN"
    assert s.base_url == "https://gl.home"
