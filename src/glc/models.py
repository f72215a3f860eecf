# src/glc/models.py
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, TypeVar

T = TypeVar("T")


class DecodeError(ValueError):
    """Body konnte nicht als JSON-Array von Objekten gelesen werden."""

    def __init__(self, message: str, *, body: str) -> None:
        super().__init__(message)
        self.body = body


@dataclass(frozen=True)
class User:
    id: int = 0
    username: str = ""
    email: str = ""
    name: str = ""
    state: str = ""
    created_at: str = ""


@dataclass(frozen=True)
class Project:
    id: int = 0
    name: str = ""
    name_with_namespace: str = ""
    path: str = ""
    path_with_namespace: str = ""
    issues_enabled: bool = False
    created_at: str = ""
    description: str = ""
    public: bool = False
    visibility_level: int = 0
    ssh_url_to_repo: str = ""
    http_url_to_repo: str = ""
    web_url: str = ""


@dataclass(frozen=True)
class Issue:
    id: int = 0
    iid: int = 0
    project_id: int = 0
    title: str = ""
    description: str = ""
    assignee: User = field(default_factory=User)
    author: User = field(default_factory=User)
    state: str = ""
    updated_at: str = ""
    created_at: str = ""


class FieldTypeError(ValueError):
    """Feld hat den falschen JSON-Typ (z.B. "12" statt 12)."""


def _typed(d: Dict[str, Any], key: str, kind: type, zero):
    # null bzw. fehlend ergibt den Nullwert; bool zählt nicht als int
    val = d.get(key)
    if val is None:
        return zero
    if not isinstance(val, kind) or (kind is int and isinstance(val, bool)):
        raise FieldTypeError(f"field {key!r}: expected {kind.__name__}, got {type(val).__name__}")
    return val


def _str(d: Dict[str, Any], key: str) -> str:
    return _typed(d, key, str, "")


def _int(d: Dict[str, Any], key: str) -> int:
    return _typed(d, key, int, 0)


def _bool(d: Dict[str, Any], key: str) -> bool:
    return _typed(d, key, bool, False)


def parse_user(raw: Dict[str, Any] | None) -> User:
    if raw is None:
        return User()
    if not isinstance(raw, dict):
        raise FieldTypeError(f"user: expected object, got {type(raw).__name__}")
    return User(
        id=_int(raw, "id"),
        username=_str(raw, "username"),
        email=_str(raw, "email"),
        name=_str(raw, "name"),
        state=_str(raw, "state"),
        created_at=_str(raw, "created_at"),
    )


def parse_project(raw: Dict[str, Any]) -> Project:
    return Project(
        id=_int(raw, "id"),
        name=_str(raw, "name"),
        name_with_namespace=_str(raw, "name_with_namespace"),
        path=_str(raw, "path"),
        path_with_namespace=_str(raw, "path_with_namespace"),
        issues_enabled=_bool(raw, "issues_enabled"),
        created_at=_str(raw, "created_at"),
        description=_str(raw, "description"),
        public=_bool(raw, "public"),
        visibility_level=_int(raw, "visibility_level"),
        ssh_url_to_repo=_str(raw, "ssh_url_to_repo"),
        http_url_to_repo=_str(raw, "http_url_to_repo"),
        web_url=_str(raw, "web_url"),
    )


def parse_issue(raw: Dict[str, Any]) -> Issue:
    return Issue(
        id=_int(raw, "id"),
        iid=_int(raw, "iid"),
        project_id=_int(raw, "project_id"),
        title=_str(raw, "title"),
        description=_str(raw, "description"),
        assignee=parse_user(raw.get("assignee")),
        author=parse_user(raw.get("author")),
        state=_str(raw, "state"),
        updated_at=_str(raw, "updated_at"),
        created_at=_str(raw, "created_at"),
    )


def _decode_list(body: str, parse: Callable[[Dict[str, Any]], T]) -> List[T]:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"error while unmarshaling json: {e}", body=body) from e
    if not isinstance(data, list):
        raise DecodeError(f"expected a JSON array, got {type(data).__name__}", body=body)
    out: List[T] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise DecodeError(f"element {i} is not an object", body=body)
        try:
            out.append(parse(item))
        except FieldTypeError as e:
            raise DecodeError(f"element {i}: {e}", body=body) from e
    return out


def decode_projects(body: str) -> List[Project]:
    return _decode_list(body, parse_project)


def decode_issues(body: str) -> List[Issue]:
    return _decode_list(body, parse_issue)
