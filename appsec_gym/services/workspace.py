"""Workspace setup — makes a challenge workspace ready for security linting.

Both steps are idempotent and never overwrite user-provided files:
an existing ESLint config is left alone, and package.json is only rewritten
when a security dev dependency was actually missing.
"""

import json
from pathlib import Path

import structlog

from appsec_gym.validators.rules import (
    DEPENDENCY_MANIFEST,
    ESLINT_CONFIG_FILENAME,
    ESLINT_SECURITY_CONFIG,
    SECURITY_DEV_DEPENDENCIES,
)

logger = structlog.get_logger()


def _write_json(path: Path, data: dict) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def ensure_eslint_config(workspace: Path) -> bool:
    """Write the security lint profile if the workspace has no config. Returns True if written."""
    config_path = workspace / ESLINT_CONFIG_FILENAME
    if config_path.exists():
        return False

    workspace.mkdir(parents=True, exist_ok=True)
    _write_json(config_path, ESLINT_SECURITY_CONFIG)
    logger.info("eslint_config_written", path=str(config_path))
    return True


def ensure_security_dependencies(workspace: Path) -> list[str]:
    """Declare the linter and its security plugin as dev dependencies.

    Only touches an existing manifest. Returns the names that were added.
    Raises ValueError if the manifest is not a JSON object.
    """
    manifest_path = workspace / DEPENDENCY_MANIFEST
    if not manifest_path.exists():
        return []

    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    if not isinstance(manifest, dict):
        raise ValueError(f"{manifest_path} is not a JSON object")

    dev_dependencies = manifest.get("devDependencies")
    if not isinstance(dev_dependencies, dict):
        dev_dependencies = {}
        manifest["devDependencies"] = dev_dependencies

    added = []
    for package, version in SECURITY_DEV_DEPENDENCIES.items():
        if package not in dev_dependencies:
            dev_dependencies[package] = version
            added.append(package)

    if added:
        _write_json(manifest_path, manifest)
        logger.info("security_dependencies_added", path=str(manifest_path), packages=added)

    return added


def prepare_workspace(workspace: Path) -> None:
    """Full setup step run before static analysis."""
    ensure_eslint_config(workspace)
    ensure_security_dependencies(workspace)
