"""
git.py

Responsibility: A small async git client over the `git` CLI.

All commands are run with `asyncio.create_subprocess_exec`; a non-zero exit
raises `GitError` carrying the command output. Nothing is retried.

Authentication for smart-HTTP remotes is sent as an `Authorization: Basic`
extra header injected through `GIT_CONFIG_*` environment variables, so the
token is never part of argv, never logged and never written to `.git/config`.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
from dataclasses import dataclass
from pathlib import Path


class GitError(RuntimeError):
    def __init__(self, args: list[str], returncode: int, output: str) -> None:
        super().__init__(f"Command failed: git {' '.join(args)}\n\n{output}")
        self.returncode = returncode
        self.output = output


@dataclass(frozen=True)
class GitAuth:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"GitAuth(username={self.username!r}, password=***)"


@dataclass(frozen=True)
class GitAuthorInfo:
    name: str | None = None
    email: str | None = None


def _auth_env(auth: GitAuth | None, base: dict[str, str]) -> dict[str, str]:
    """Append the auth header after any `GIT_CONFIG_*` entries already in `base`."""
    if auth is None:
        return {}
    index = int(base.get("GIT_CONFIG_COUNT") or 0)
    basic = base64.b64encode(f"{auth.username}:{auth.password}".encode("utf-8")).decode("ascii")
    return {
        "GIT_CONFIG_COUNT": str(index + 1),
        f"GIT_CONFIG_KEY_{index}": "http.extraHeader",
        f"GIT_CONFIG_VALUE_{index}": f"Authorization: Basic {basic}",
        "GIT_TERMINAL_PROMPT": "0",
    }


class Git:
    def __init__(self, *, auth: GitAuth | None = None, logger: logging.Logger | None = None) -> None:
        self._auth = auth
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_auth(cls, *, username: str, password: str, logger: logging.Logger | None = None) -> Git:
        return cls(auth=GitAuth(username=username, password=password), logger=logger)

    def _env(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        env = os.environ.copy()
        env.update(_auth_env(self._auth, env))
        if extra:
            env.update(extra)
        return env

    async def _run(
        self,
        args: list[str],
        *,
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
        check: bool = True,
    ) -> tuple[int, str]:
        self._logger.info("git %s", " ".join(args))
        process = await asyncio.create_subprocess_exec(
            "git",
            *args,
            cwd=str(cwd) if cwd is not None else None,
            env=self._env(env),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        stdout, _ = await process.communicate()
        output = stdout.decode("utf-8", errors="replace")
        if check and process.returncode != 0:
            raise GitError(args, process.returncode, output)
        return process.returncode, output

    async def clone(self, *, url: str, dir: str | Path, depth: int | None = None, remote: str = "origin") -> None:
        """
        Clone `url` into `dir`.

        A `dir` that already holds files (e.g. output of an earlier template
        step) is turned into a repository in place: init, add `remote`, fetch.
        Nothing is checked out in that case; the caller checks out a branch.
        """
        path = Path(dir)
        depth_args = ["--depth", str(depth)] if depth is not None else []

        if path.is_dir() and any(path.iterdir()):
            await self._run(["init"], cwd=path)
            await self.add_remote(dir=path, remote=remote, url=url)
            await self._run(["fetch", *depth_args, remote], cwd=path)
            return

        path.mkdir(parents=True, exist_ok=True)
        # Keep every branch reachable so a later checkout can switch to it.
        single_branch = ["--no-single-branch"] if depth is not None else []
        await self._run(["clone", *depth_args, *single_branch, "--origin", remote, "--", url, str(path)])

    async def add_remote(self, *, dir: str | Path, remote: str, url: str) -> None:
        """
        Register `remote`. An existing remote with the same URL is left alone;
        for any other existing remote `git remote add` fails and raises.
        """
        code, output = await self._run(["remote", "get-url", remote], cwd=dir, check=False)
        if code == 0 and output.strip() == url:
            return
        await self._run(["remote", "add", remote, url], cwd=dir)

    async def checkout(self, *, dir: str | Path, ref: str) -> None:
        await self._run(["checkout", ref], cwd=dir)

    async def current_branch(self, *, dir: str | Path) -> str | None:
        """Name of the checked-out branch, or None when HEAD is detached."""
        code, output = await self._run(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=dir, check=False)
        if code != 0:
            return None
        return output.strip() or None

    async def branch(self, *, dir: str | Path, ref: str) -> None:
        await self._run(["branch", ref], cwd=dir)

    async def add(self, *, dir: str | Path, filepath: str) -> None:
        await self._run(["add", "--", filepath], cwd=dir)

    async def commit(
        self,
        *,
        dir: str | Path,
        message: str,
        author: GitAuthorInfo,
        committer: GitAuthorInfo,
    ) -> str:
        """Commit the index and return the new commit hash."""
        env = {
            "GIT_AUTHOR_NAME": author.name or "",
            "GIT_AUTHOR_EMAIL": author.email or "",
            "GIT_COMMITTER_NAME": committer.name or "",
            "GIT_COMMITTER_EMAIL": committer.email or "",
        }
        await self._run(["commit", "--allow-empty", "-m", message], cwd=dir, env=env)
        _, sha = await self._run(["rev-parse", "HEAD"], cwd=dir)
        return sha.strip()

    async def push(self, *, dir: str | Path, remote: str, remote_ref: str) -> None:
        await self._run(["push", remote, f"HEAD:{remote_ref}"], cwd=dir)
