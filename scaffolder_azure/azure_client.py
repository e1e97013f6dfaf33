"""
azure_client.py

Responsibility: Isolate all direct Azure DevOps REST API interaction.

This module must be the only place that:
- Constructs Azure DevOps REST endpoints
- Sends HTTP requests to the Azure DevOps service
- Interprets Azure DevOps API responses / error payloads

Authentication is pluggable through request handlers (PAT or bearer), so the
same client works with tokens from the input or from the integrations config.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

API_VERSION = "7.0"


class AzureDevOpsError(RuntimeError):
    def __init__(self, status_code: int, method: str, path: str, message: str) -> None:
        super().__init__(f"Azure DevOps API error {status_code} {method} {path}: {message}")
        self.status_code = status_code


class PersonalAccessTokenHandler:
    """Basic auth with an empty user name and the PAT as password."""

    def __init__(self, token: str) -> None:
        self._token = token

    def __repr__(self) -> str:
        return "PersonalAccessTokenHandler(token=***)"

    def prepare_request(self, headers: dict[str, str]) -> None:
        encoded = base64.b64encode(f":{self._token}".encode("utf-8")).decode("ascii")
        headers["Authorization"] = f"Basic {encoded}"


class BearerCredentialHandler:
    def __init__(self, token: str) -> None:
        self._token = token

    def __repr__(self) -> str:
        return "BearerCredentialHandler(token=***)"

    def prepare_request(self, headers: dict[str, str]) -> None:
        headers["Authorization"] = f"Bearer {self._token}"


def get_personal_access_token_handler(token: str) -> PersonalAccessTokenHandler:
    return PersonalAccessTokenHandler(token)


def get_bearer_handler(token: str) -> BearerCredentialHandler:
    return BearerCredentialHandler(token)


AuthHandler = PersonalAccessTokenHandler | BearerCredentialHandler


@dataclass(frozen=True)
class GitPullRequest:
    """Pull-request creation payload."""

    source_ref_name: str
    target_ref_name: str
    title: str
    description: str | None = None

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "sourceRefName": self.source_ref_name,
            "targetRefName": self.target_ref_name,
            "title": self.title,
        }
        if self.description is not None:
            body["description"] = self.description
        return body


@dataclass(frozen=True)
class PullRequestInfo:
    pull_request_id: int
    url: str
    status: str


class WebApi:
    """A connection to one organization/collection URL."""

    def __init__(self, url: str, auth_handler: AuthHandler, *, timeout: float = 30) -> None:
        self.url = url.rstrip("/")
        self._auth_handler = auth_handler
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "scaffolder-azure-repo",
        }
        self._auth_handler.prepare_request(headers)
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.url}{path}"
        query = {"api-version": API_VERSION, **(params or {})}
        logger.debug("Azure DevOps request %s %s", method, path)
        r = requests.request(method, url, headers=self._headers(), params=query, json=json_body, timeout=self._timeout)
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise AzureDevOpsError(r.status_code, method, path, str(message))
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    def get_git_api(self) -> GitApi:
        return GitApi(self)


class GitApi:
    def __init__(self, connection: WebApi) -> None:
        self._connection = connection

    def create_pull_request(
        self,
        pull_request: GitPullRequest,
        repository_id: str,
        project: str | None = None,
        supports_iterations: bool | None = None,
    ) -> PullRequestInfo:
        """
        Create a pull request in `repository_id` (name or GUID).

        `project` may be omitted when `repository_id` is a GUID.
        """
        prefix = f"/{quote(project, safe='')}" if project else ""
        path = f"{prefix}/_apis/git/repositories/{quote(repository_id, safe='')}/pullrequests"
        params: dict[str, str] = {}
        if supports_iterations is not None:
            params["supportsIterations"] = "true" if supports_iterations else "false"

        data = self._connection.request("POST", path, params=params, json_body=pull_request.to_json()) or {}
        return PullRequestInfo(
            pull_request_id=int(data.get("pullRequestId") or 0),
            url=str(data.get("url") or ""),
            status=str(data.get("status") or ""),
        )
