"""
action.py

Responsibility: The seam between these actions and the scaffolding host.

A host registers `TemplateAction`s by id and, for each step of a run, calls
`action.handle(ActionContext(...))`. Input is validated against the action's
JSON schema before the handler runs.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from scaffolder_azure.errors import InputError


@dataclass
class ActionContext:
    workspace_path: Path
    input: Mapping[str, Any]
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("scaffolder_azure.action"))


Handler = Callable[[ActionContext], Awaitable[None]]


@dataclass(frozen=True)
class TemplateAction:
    id: str
    description: str
    schema: dict[str, Any]
    handler: Handler

    def validate_input(self, value: Mapping[str, Any]) -> None:
        validator = Draft202012Validator(self.schema["input"])
        errors = sorted(validator.iter_errors(dict(value)), key=lambda e: [str(p) for p in e.path])
        if errors:
            details = "; ".join(
                f"{'.'.join(str(p) for p in e.path) or '<input>'}: {e.message}" for e in errors
            )
            raise InputError(f"Invalid input passed to action {self.id}: {details}")

    async def handle(self, ctx: ActionContext) -> None:
        self.validate_input(ctx.input)
        await self.handler(ctx)


def create_template_action(
    *,
    id: str,
    description: str,
    schema: dict[str, Any],
    handler: Handler,
) -> TemplateAction:
    return TemplateAction(id=id, description=description, schema=schema, handler=handler)


def string_property(title: str, description: str) -> dict[str, str]:
    return {"title": title, "type": "string", "description": description}


ORGANIZATION_PROPERTY = string_property("Organization Name", "The name of the organization in Azure DevOps.")
SERVER_PROPERTY = string_property(
    "Server hostname", "The hostname of the Azure DevOps service. Defaults to dev.azure.com"
)
TOKEN_PROPERTY = string_property("Authentication Token", "The token to use for authorization.")
