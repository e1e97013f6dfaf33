import base64
from unittest.mock import Mock

import pytest

from scaffolder_azure.azure_client import (
    AzureDevOpsError,
    GitPullRequest,
    WebApi,
    get_bearer_handler,
    get_personal_access_token_handler,
)


def _response(status_code: int, payload: object) -> Mock:
    r = Mock(status_code=status_code, content=b"{}", text="")
    r.json.return_value = payload
    return r


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch) -> Mock:
    request = Mock(return_value=_response(201, {"pullRequestId": 17, "url": "https://pr/17", "status": "active"}))
    monkeypatch.setattr("scaffolder_azure.azure_client.requests.request", request)
    return request


def test_create_pull_request_posts_descriptor(http: Mock) -> None:
    api = WebApi("https://dev.azure.com/contoso/", get_personal_access_token_handler("pat")).get_git_api()
    pr = GitPullRequest(source_ref_name="refs/heads/feature-x", target_ref_name="refs/heads/main", title="Add x")

    created = api.create_pull_request(pr, "repo-id", "Project One", True)

    method, url = http.call_args.args
    kwargs = http.call_args.kwargs
    assert method == "POST"
    assert url == "https://dev.azure.com/contoso/Project%20One/_apis/git/repositories/repo-id/pullrequests"
    assert kwargs["params"] == {"api-version": "7.0", "supportsIterations": "true"}
    assert kwargs["json"] == {
        "sourceRefName": "refs/heads/feature-x",
        "targetRefName": "refs/heads/main",
        "title": "Add x",
    }
    assert created.pull_request_id == 17


def test_project_and_iterations_are_optional(http: Mock) -> None:
    api = WebApi("https://dev.azure.com/contoso", get_personal_access_token_handler("pat")).get_git_api()
    api.create_pull_request(GitPullRequest("refs/heads/a", "refs/heads/b", "t"), "repo-guid")

    _, url = http.call_args.args
    assert url == "https://dev.azure.com/contoso/_apis/git/repositories/repo-guid/pullrequests"
    assert http.call_args.kwargs["params"] == {"api-version": "7.0"}


def test_pat_handler_uses_basic_auth(http: Mock) -> None:
    api = WebApi("https://dev.azure.com/contoso", get_personal_access_token_handler("pat")).get_git_api()
    api.create_pull_request(GitPullRequest("refs/heads/a", "refs/heads/b", "t"), "r", "p")

    expected = base64.b64encode(b":pat").decode("ascii")
    assert http.call_args.kwargs["headers"]["Authorization"] == f"Basic {expected}"


def test_bearer_handler_uses_bearer_auth(http: Mock) -> None:
    api = WebApi("https://dev.azure.com/contoso", get_bearer_handler("aad")).get_git_api()
    api.create_pull_request(GitPullRequest("refs/heads/a", "refs/heads/b", "t"), "r", "p")

    assert http.call_args.kwargs["headers"]["Authorization"] == "Bearer aad"


def test_error_status_raises_with_message(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "scaffolder_azure.azure_client.requests.request",
        Mock(return_value=_response(409, {"message": "An active pull request already exists."})),
    )
    api = WebApi("https://dev.azure.com/contoso", get_personal_access_token_handler("pat")).get_git_api()

    with pytest.raises(AzureDevOpsError, match="409.*already exists") as excinfo:
        api.create_pull_request(GitPullRequest("refs/heads/a", "refs/heads/b", "t"), "r", "p")
    assert excinfo.value.status_code == 409


def test_handlers_hide_token_from_repr() -> None:
    assert "pat-value" not in repr(get_personal_access_token_handler("pat-value"))
    assert "aad-value" not in repr(get_bearer_handler("aad-value"))
