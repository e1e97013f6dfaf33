"""
helpers.py

Responsibility: The three delegates behind the actions.

- `clone_repo`: shallow clone + remote + checkout
- `commit_and_push_branch`: branch (if needed) + add + commit + push
- `create_ado_pull_request`: one REST call through a fresh connection

Every failure from git or the REST API propagates as-is.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from scaffolder_azure.azure_client import AuthHandler, GitPullRequest, PullRequestInfo, WebApi
from scaffolder_azure.git import Git, GitAuth, GitAuthorInfo

DEFAULT_AUTHOR_NAME = "Scaffolder"
DEFAULT_AUTHOR_EMAIL = "scaffolder@backstage.io"


async def clone_repo(
    *,
    dir: str | Path,
    auth: GitAuth,
    logger: logging.Logger,
    remote_url: str,
    remote: str = "origin",
    branch: str = "main",
) -> None:
    git = Git.from_auth(username=auth.username, password=auth.password, logger=logger)

    await git.clone(url=remote_url, dir=dir, depth=1, remote=remote)
    await git.add_remote(dir=dir, remote=remote, url=remote_url)
    await git.checkout(dir=dir, ref=branch)


async def commit_and_push_branch(
    *,
    dir: str | Path,
    auth: GitAuth,
    logger: logging.Logger,
    commit_message: str,
    git_author_info: GitAuthorInfo | None = None,
    remote: str = "origin",
    branch: str = "scaffolder",
) -> str:
    """
    Commit everything in `dir` onto `branch` and push it to `remote`.

    Returns the hash of the new commit.
    """
    author_info = GitAuthorInfo(
        name=(git_author_info.name if git_author_info else None) or DEFAULT_AUTHOR_NAME,
        email=(git_author_info.email if git_author_info else None) or DEFAULT_AUTHOR_EMAIL,
    )

    git = Git.from_auth(username=auth.username, password=auth.password, logger=logger)

    current_branch = await git.current_branch(dir=dir)
    if current_branch != branch:
        await git.branch(dir=dir, ref=branch)
        await git.checkout(dir=dir, ref=branch)

    await git.add(dir=dir, filepath=".")
    sha = await git.commit(dir=dir, message=commit_message, author=author_info, committer=author_info)
    await git.push(dir=dir, remote=remote, remote_ref=f"refs/heads/{branch}")
    return sha


async def create_ado_pull_request(
    *,
    git_pull_request_to_create: GitPullRequest,
    url: str,
    auth_handler: AuthHandler,
    repo_id: str,
    project: str | None = None,
    supports_iterations: bool | None = None,
) -> PullRequestInfo:
    connection = WebApi(url, auth_handler)
    git_api = connection.get_git_api()
    return await asyncio.to_thread(
        git_api.create_pull_request,
        git_pull_request_to_create,
        repo_id,
        project,
        supports_iterations,
    )
