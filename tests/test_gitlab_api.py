from __future__ import annotations
import httpx
import pytest
from glc.config import Settings
from glc.gitlab_api import GitLabClient, build_issues_path, PROJECTS_PATH, ISSUES_PATH


def make_client(handler) -> GitLabClient:
    s = Settings(base_url="https://gitlab.local", token="t")
    return GitLabClient(s, client=s.build_client(transport=httpx.MockTransport(handler)))


def test_build_issues_path():
    assert build_issues_path() == "/api/v3/issues"
    assert build_issues_path("42") == "/api/v3/projects/42/issues"
    assert build_issues_path("group/name") == "/api/v3/projects/group%2Fname/issues"
    # nur der erste Slash wird kodiert
    assert build_issues_path("group/sub/name") == "/api/v3/projects/group%2Fsub/name/issues"


def test_get_projects_returns_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == PROJECTS_PATH
        assert request.headers["PRIVATE-TOKEN"] == "t"
        return httpx.Response(200, text='[{"id": 1}]')

    with make_client(handler) as client:
        assert client.get_projects() == '[{"id": 1}]'


def test_get_issues_for_project_with_per_page():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["raw_path"] = request.url.raw_path
        seen["per_page"] = request.url.params.get("per_page")
        return httpx.Response(200, text="[]")

    with make_client(handler) as client:
        client.get_issues(project_id="group/name", per_page=50)

    assert seen["raw_path"] == b"/api/v3/projects/group%2Fname/issues?per_page=50"
    assert seen["per_page"] == "50"


def test_get_issues_without_project_has_no_query():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["query"] = request.url.query
        return httpx.Response(200, text="[]")

    with make_client(handler) as client:
        assert client.get_issues() == "[]"

    assert seen["path"] == ISSUES_PATH
    assert seen["query"] == b""


def test_non_2xx_raises_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "401 Unauthorized"})

    with make_client(handler) as client:
        with pytest.raises(httpx.HTTPStatusError) as excinfo:
            client.get_projects()

    assert excinfo.value.response.status_code == 401
    assert "401 Unauthorized" in str(excinfo.value)


def test_transport_error_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(handler) as client:
        with pytest.raises(httpx.ConnectError):
            client.get_issues()


def test_injected_client_is_not_closed():
    s = Settings(base_url="https://gitlab.local", token="t")
    http = s.build_client(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="[]")))
    with GitLabClient(s, client=http):
        pass
    assert not http.is_closed
    http.close()
