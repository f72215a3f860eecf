from __future__ import annotations
import logging
import httpx

from .config import Settings

log = logging.getLogger(__name__)

API_PREFIX = "/api/v3"
PROJECTS_PATH = API_PREFIX + "/projects"
ISSUES_PATH = API_PREFIX + "/issues"


def build_issues_path(project_id: str | None = None) -> str:
    """
    /api/v3/issues bzw. /api/v3/projects/<id>/issues.
    Nur der erste "/" der Projekt-ID wird als %2F kodiert ("group/name").
    """
    if not project_id:
        return ISSUES_PATH
    encoded = project_id.replace("/", "%2F", 1)
    return f"{PROJECTS_PATH}/{encoded}/issues"


class GitLabClient:
    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self._owns_client = client is None
        self.client = client or settings.build_client()

    # lifecycle
    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # API
    def _get(self, path: str, params: dict | None = None) -> str:
        r = self.client.get(path, params=params)
        log.info("HTTP response", extra={"method": "GET", "url": str(r.request.url), "status_code": r.status_code})
        try:
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise httpx.HTTPStatusError(
                f"{path} returned {r.status_code}. Body: {r.text}",
                request=r.request,
                response=r,
            ) from e
        return r.text

    def get_projects(self) -> str:
        """GET /api/v3/projects, liefert den rohen Body."""
        return self._get(PROJECTS_PATH)

    def get_issues(self, project_id: str | None = None, per_page: int | None = None) -> str:
        params = {"per_page": per_page} if per_page is not None else None
        return self._get(build_issues_path(project_id), params=params)


__all__ = [
    "GitLabClient",
    "API_PREFIX",
    "PROJECTS_PATH",
    "ISSUES_PATH",
    "build_issues_path",
]
