"""
Shared fixtures: app-config on disk, integrations, and a recording stand-in
for the git client.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from scaffolder_azure.config import Config, load_config
from scaffolder_azure.integrations import ScmIntegrations

APP_CONFIG = """\
integrations:
  azure:
    - host: dev.azure.com
      credentials:
        - organizations: [contoso]
          personalAccessToken: contoso-pat
        - personalAccessToken: fallback-pat
    - host: ado.internal.example
      token: legacy-token
  github:
    - host: github.com
"""


@pytest.fixture
def app_config(tmp_path: Path) -> Config:
    path = tmp_path / "app-config.yaml"
    path.write_text(APP_CONFIG, encoding="utf-8")
    return load_config(path)


@pytest.fixture
def integrations(app_config: Config) -> ScmIntegrations:
    return ScmIntegrations.from_config(app_config)


@pytest.fixture
def bare_integrations() -> ScmIntegrations:
    """Only the built-in dev.azure.com integration, without any credentials."""
    return ScmIntegrations.from_config(Config())


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("tests")


class RecordingGit:
    """Records calls in order; `current` is what `current_branch` returns."""

    def __init__(self, username: str, password: str, current: str | None) -> None:
        self.username = username
        self.password = password
        self.current = current
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def clone(self, **kwargs: Any) -> None:
        self.calls.append(("clone", kwargs))

    async def add_remote(self, **kwargs: Any) -> None:
        self.calls.append(("add_remote", kwargs))

    async def checkout(self, **kwargs: Any) -> None:
        self.calls.append(("checkout", kwargs))

    async def current_branch(self, **kwargs: Any) -> str | None:
        self.calls.append(("current_branch", kwargs))
        return self.current

    async def branch(self, **kwargs: Any) -> None:
        self.calls.append(("branch", kwargs))

    async def add(self, **kwargs: Any) -> None:
        self.calls.append(("add", kwargs))

    async def commit(self, **kwargs: Any) -> str:
        self.calls.append(("commit", kwargs))
        return "0" * 40

    async def push(self, **kwargs: Any) -> None:
        self.calls.append(("push", kwargs))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def call(self, name: str) -> dict[str, Any]:
        for n, kwargs in self.calls:
            if n == name:
                return kwargs
        raise AssertionError(f"{name} was not called")


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch):
    """
    Replace the git client used by the helpers. Returns a function that sets
    the branch reported as currently checked out and yields the last client.
    """
    state: dict[str, Any] = {"current": "main", "last": None}

    class _Factory:
        @staticmethod
        def from_auth(*, username: str, password: str, logger: logging.Logger | None = None) -> RecordingGit:
            git = RecordingGit(username, password, state["current"])
            state["last"] = git
            return git

    monkeypatch.setattr("scaffolder_azure.helpers.Git", _Factory)

    class _Handle:
        def set_current_branch(self, name: str | None) -> None:
            state["current"] = name

        @property
        def last(self) -> RecordingGit:
            assert state["last"] is not None, "git client was never created"
            return state["last"]

        @property
        def used(self) -> bool:
            return state["last"] is not None

    return _Handle()
