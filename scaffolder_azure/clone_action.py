"""
clone_action.py

`azure:repo:clone` - clone an Azure DevOps repository into the workspace.
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
from scaffolder_azure.credentials import AzureDevOpsCredentialsProvider, resolve_credentials
from scaffolder_azure.git import GitAuth
from scaffolder_azure.helpers import clone_repo
from scaffolder_azure.integrations import ScmIntegrations
from scaffolder_azure.paths import resolve_safe_child_path

ACTION_ID = "azure:repo:clone"

SCHEMA = {
    "input": {
        "type": "object",
        "required": ["remoteUrl"],
        "properties": {
            "organization": ORGANIZATION_PROPERTY,
            "remoteUrl": string_property("Remote URL", "The Git URL to the repository."),
            "repoUrl": string_property(
                "Repository Location",
                "Deprecated and ignored; use remoteUrl.",
            ),
            "branch": string_property("Repository Branch", "The branch to checkout to."),
            "targetPath": string_property(
                "Working Subdirectory",
                "The subdirectory of the working directory to clone the repository into.",
            ),
            "server": SERVER_PROPERTY,
            "token": TOKEN_PROPERTY,
        },
    },
}


def create_clone_azure_repo_action(
    *,
    integrations: ScmIntegrations,
    credentials_provider: AzureDevOpsCredentialsProvider | None = None,
) -> TemplateAction:
    async def handler(ctx: ActionContext) -> None:
        remote_url = ctx.input["remoteUrl"]
        branch = ctx.input.get("branch") or "main"

        if ctx.input.get("repoUrl") is not None:
            ctx.logger.warning("Input 'repoUrl' is ignored by %s; cloning from 'remoteUrl'", ACTION_ID)

        output_dir = resolve_safe_child_path(ctx.workspace_path, ctx.input.get("targetPath") or "./")

        resolved = resolve_credentials(
            integrations,
            server=ctx.input.get("server"),
            organization=ctx.input.get("organization"),
            token=ctx.input.get("token"),
            provider=credentials_provider,
        )

        ctx.logger.info("Cloning %s (branch %s) into %s", remote_url, branch, output_dir)
        await clone_repo(
            dir=output_dir,
            auth=GitAuth(username="notempty", password=resolved.token),
            logger=ctx.logger,
            remote_url=remote_url,
            branch=branch,
        )

    return create_template_action(
        id=ACTION_ID,
        description="Clone an Azure repository into the workspace directory.",
        schema=SCHEMA,
        handler=handler,
    )
