"""
pr_action.py

`azure:repo:pr` - open a pull request in an Azure DevOps repository.
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
from scaffolder_azure.azure_client import GitPullRequest
from scaffolder_azure.credentials import AzureDevOpsCredentialsProvider, get_auth_handler, resolve_credentials
from scaffolder_azure.helpers import create_ado_pull_request
from scaffolder_azure.integrations import ScmIntegrations

ACTION_ID = "azure:repo:pr"

SCHEMA = {
    "input": {
        "type": "object",
        "required": ["repoId", "title"],
        "properties": {
            "organization": ORGANIZATION_PROPERTY,
            "sourceBranch": string_property("Source Branch", "The branch to merge into the target (default: scaffolder)."),
            "targetBranch": string_property("Target Branch", "The branch to merge into (default: main)."),
            "title": string_property("Title", "The title of the pull request."),
            "description": string_property("Description", "The description of the pull request."),
            "repoId": string_property("Remote Repo ID", "Repo ID of the pull request."),
            "project": string_property("ADO Project", "The Project in Azure DevOps."),
            "supportsIterations": {
                "title": "Supports Iterations",
                "type": "boolean",
                "description": "Whether or not the PR supports iterations.",
            },
            "server": SERVER_PROPERTY,
            "token": TOKEN_PROPERTY,
        },
    },
}


def create_pull_request_azure_repo_action(
    *,
    integrations: ScmIntegrations,
    credentials_provider: AzureDevOpsCredentialsProvider | None = None,
) -> TemplateAction:
    async def handler(ctx: ActionContext) -> None:
        pull_request = GitPullRequest(
            source_ref_name=f"refs/heads/{ctx.input.get('sourceBranch') or 'scaffolder'}",
            target_ref_name=f"refs/heads/{ctx.input.get('targetBranch') or 'main'}",
            title=ctx.input["title"],
            description=ctx.input.get("description"),
        )

        resolved = resolve_credentials(
            integrations,
            server=ctx.input.get("server"),
            organization=ctx.input.get("organization"),
            token=ctx.input.get("token"),
            provider=credentials_provider,
        )

        ctx.logger.info(
            "Creating pull request %s -> %s in %s",
            pull_request.source_ref_name,
            pull_request.target_ref_name,
            ctx.input["repoId"],
        )
        created = await create_ado_pull_request(
            git_pull_request_to_create=pull_request,
            url=resolved.url,
            auth_handler=get_auth_handler(resolved),
            repo_id=ctx.input["repoId"],
            project=ctx.input.get("project"),
            supports_iterations=ctx.input.get("supportsIterations"),
        )
        ctx.logger.info("Created pull request %s", created.pull_request_id)

    return create_template_action(
        id=ACTION_ID,
        description="Create a PR to a repository in Azure DevOps.",
        schema=SCHEMA,
        handler=handler,
    )
