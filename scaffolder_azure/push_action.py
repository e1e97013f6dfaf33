"""
push_action.py

`azure:repo:push` - commit the workspace and push it to an Azure DevOps branch.
"""

from __future__ import annotations

from scaffolder_azure.action import (
    ORGANIZATION_PROPERTY,
    SERVER_PROPERTY,
    TOKEN_PROPERTY,
    ActionContext,
    TemplateAction,
    create_template_action,
    string_property,
)
from scaffolder_azure.config import Config, ScaffolderDefaults
from scaffolder_azure.credentials import AzureDevOpsCredentialsProvider, resolve_credentials
from scaffolder_azure.git import GitAuth, GitAuthorInfo
from scaffolder_azure.helpers import commit_and_push_branch
from scaffolder_azure.integrations import ScmIntegrations
from scaffolder_azure.paths import get_repo_source_directory

ACTION_ID = "azure:repo:push"

SCHEMA = {
    "input": {
        "type": "object",
        "required": [],
        "properties": {
            "organization": ORGANIZATION_PROPERTY,
            "branch": string_property("Repository Branch", "The branch to checkout to."),
            "sourcePath": string_property(
                "Working Subdirectory",
                "The subdirectory of the working directory containing the repository.",
            ),
            "gitCommitMessage": string_property(
                "Git Commit Message",
                "Sets the commit message on the repository. The default value is 'Initial commit'",
            ),
            "gitAuthorName": string_property(
                "Default Author Name",
                "Sets the default author name for the commit. The default value is 'Scaffolder'.",
            ),
            "gitAuthorEmail": string_property("Default Author Email", "Sets the default author email for the commit."),
            "server": SERVER_PROPERTY,
            "token": TOKEN_PROPERTY,
        },
    },
}


def create_push_azure_repo_action(
    *,
    integrations: ScmIntegrations,
    config: Config,
    credentials_provider: AzureDevOpsCredentialsProvider | None = None,
) -> TemplateAction:
    async def handler(ctx: ActionContext) -> None:
        defaults = ScaffolderDefaults.from_config(config)
        branch = ctx.input.get("branch") or "scaffolder"

        source_path = get_repo_source_directory(ctx.workspace_path, ctx.input.get("sourcePath"))

        resolved = resolve_credentials(
            integrations,
            server=ctx.input.get("server"),
            organization=ctx.input.get("organization"),
            token=ctx.input.get("token"),
            provider=credentials_provider,
        )

        author = GitAuthorInfo(
            name=ctx.input.get("gitAuthorName") or defaults.author_name,
            email=ctx.input.get("gitAuthorEmail") or defaults.author_email,
        )

        ctx.logger.info("Pushing %s to branch %s", source_path, branch)
        await commit_and_push_branch(
            dir=source_path,
            auth=GitAuth(username="notempty", password=resolved.token),
            logger=ctx.logger,
            commit_message=ctx.input.get("gitCommitMessage") or defaults.commit_message,
            git_author_info=author,
            branch=branch,
        )

    return create_template_action(
        id=ACTION_ID,
        description="Push the content in the workspace to a remote Azure repository.",
        schema=SCHEMA,
        handler=handler,
    )
