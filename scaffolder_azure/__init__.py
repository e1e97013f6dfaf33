"""
scaffolder_azure package

Azure DevOps repository actions for a software-template scaffolding host.

Key responsibilities are split across modules:
- `config.py` / `integrations.py`: app-config YAML and the host -> integration registry
- `credentials.py`: token resolution (explicit input first, then integrations config)
- `paths.py`: keep working subdirectories inside the workspace
- `git.py` / `azure_client.py`: isolated git CLI and Azure DevOps REST interactions
- `helpers.py`: clone / commit-and-push / pull-request delegates
- `clone_action.py`, `push_action.py`, `pr_action.py`: the `azure:repo:*` actions
"""

from __future__ import annotations

from scaffolder_azure.action import ActionContext, TemplateAction
from scaffolder_azure.clone_action import create_clone_azure_repo_action
from scaffolder_azure.config import Config, load_config
from scaffolder_azure.integrations import ScmIntegrations
from scaffolder_azure.pr_action import create_pull_request_azure_repo_action
from scaffolder_azure.push_action import create_push_azure_repo_action

__all__ = [
    "__version__",
    "ActionContext",
    "Config",
    "ScmIntegrations",
    "TemplateAction",
    "create_azure_repo_actions",
    "create_clone_azure_repo_action",
    "create_pull_request_azure_repo_action",
    "create_push_azure_repo_action",
    "load_config",
]

__version__ = "0.1.0"


def create_azure_repo_actions(config: Config, integrations: ScmIntegrations | None = None) -> list[TemplateAction]:
    """
    Build all three actions for registration with the host.

    `integrations` defaults to the registry parsed from `config`.
    """
    if integrations is None:
        integrations = ScmIntegrations.from_config(config)
    return [
        create_clone_azure_repo_action(integrations=integrations),
        create_push_azure_repo_action(integrations=integrations, config=config),
        create_pull_request_azure_repo_action(integrations=integrations),
    ]
