"""
errors.py

Responsibility: Input-side error kinds raised by the actions.

The host surfaces the message of an `InputError` verbatim to whoever triggered
the scaffolding run. Failures coming from git or the Azure DevOps REST API are
NOT defined here; they propagate unmodified from `git.py` / `azure_client.py`.
"""

from __future__ import annotations


class InputError(ValueError):
    pass


class ConfigurationError(InputError):
    """No integration for a host, or config that cannot be interpreted."""


class CredentialError(InputError):
    """No token could be resolved from the input or the integrations config."""


class PathSafetyError(InputError):
    """A working subdirectory resolves outside the workspace."""
