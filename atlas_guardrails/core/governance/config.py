# atlas_guardrails/core/governance/config.py
"""
Guard rail configuration.

The configuration is fixed for the lifetime of a stage: it is built once,
never mutated, and shared by reference with every rule. It can be created in
code or loaded from a YAML file whose keys use either snake_case or the
camelCase names of the deployment front end.
"""

import logging
import os
import re
from typing import Any, Dict, FrozenSet, Tuple

import yaml
from pydantic import BaseModel, Field, StrictBool, StrictInt, ValidationError, field_validator

from atlas_guardrails.constants import (
    DEFAULT_APPROVED_INSTANCE_SIZES,
    DEFAULT_MAX_CLUSTER_COUNT,
    DEFAULT_REQUIRE_BACKUP_ENABLED,
)

logger = logging.getLogger(__name__)

_CAMEL_CASE_KEYS = {
    "maxClusterCount": "max_cluster_count",
    "approvedInstanceSizes": "approved_instance_sizes",
    "requireBackupEnabled": "require_backup_enabled",
}
_KNOWN_KEYS = frozenset(_CAMEL_CASE_KEYS.values())
_INSTANCE_SIZE_PATTERN = re.compile(r"^[MR]\d+(_NVME)?$")


class GuardRailConfigError(ValueError):
    """Raised when a guard rail configuration cannot be loaded."""
    pass


class GuardRailConfig(BaseModel):
    """Policy limits enforced on every Atlas cluster of a stage."""
    max_cluster_count: StrictInt = Field(
        DEFAULT_MAX_CLUSTER_COUNT, ge=0,
        description="Maximum number of clusters allowed in a single deployment stage",
    )
    approved_instance_sizes: Tuple[str, ...] = Field(
        DEFAULT_APPROVED_INSTANCE_SIZES,
        description="Approved instance sizes in display order; empty means no restriction",
    )
    require_backup_enabled: StrictBool = Field(
        DEFAULT_REQUIRE_BACKUP_ENABLED,
        description="Require automated backups to be enabled for every cluster",
    )

    class Config:
        frozen = True
        extra = "forbid"

    @field_validator("approved_instance_sizes")
    def validate_sizes(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        for size in v:
            if not size or not size.strip():
                raise ValueError("Approved instance sizes must be non-empty strings")
        return v

    @property
    def approved_set(self) -> FrozenSet[str]:
        return frozenset(self.approved_instance_sizes)

    @property
    def restricts_instance_sizes(self) -> bool:
        return len(self.approved_instance_sizes) > 0


def normalize_config_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase configuration keys to their snake_case field names."""
    return {_CAMEL_CASE_KEYS.get(key, key): value for key, value in raw.items()}


def validate_guardrail_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a raw guard rail configuration mapping.

    Args:
        config: Dictionary with guard rail settings (snake_case or camelCase keys)

    Returns:
        Dictionary with keys:
            - valid: bool
            - warnings: list of warning messages
            - errors: list of error messages (if invalid)
    """
    warnings = []
    errors = []
    config = normalize_config_keys(config)

    for key in sorted(set(config) - _KNOWN_KEYS):
        errors.append(f"Unknown guard rail setting: {key}")

    if "max_cluster_count" in config:
        count = config["max_cluster_count"]
        if isinstance(count, bool) or not isinstance(count, int):
            errors.append(f"max_cluster_count must be an integer, got {count!r}")
        elif count < 0:
            errors.append(f"max_cluster_count must be >= 0, got {count}")
        elif count == 0:
            warnings.append("max_cluster_count is 0: every cluster in the stage will be rejected")

    if "approved_instance_sizes" in config:
        sizes = config["approved_instance_sizes"]
        if not isinstance(sizes, list) or not all(isinstance(s, str) for s in sizes):
            errors.append("approved_instance_sizes must be a list of strings")
        elif not sizes:
            warnings.append("approved_instance_sizes is empty: instance sizes are not restricted")
        else:
            if len(set(sizes)) != len(sizes):
                warnings.append("approved_instance_sizes contains duplicate entries")
            for size in sizes:
                if not _INSTANCE_SIZE_PATTERN.match(size):
                    warnings.append(f"'{size}' does not look like an Atlas instance size")

    if "require_backup_enabled" in config:
        flag = config["require_backup_enabled"]
        if not isinstance(flag, bool):
            errors.append(f"require_backup_enabled must be a boolean, got {flag!r}")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def load_guardrail_config(path: str) -> GuardRailConfig:
    """
    Load a guard rail configuration from a YAML file.

    Missing settings fall back to the defaults. An empty file yields the
    default configuration.

    Raises:
        GuardRailConfigError: if the file is missing, unreadable or invalid.
    """
    if not os.path.exists(path):
        raise GuardRailConfigError(f"Guard rail config not found at {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise GuardRailConfigError(f"Guard rail config {path} is not valid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise GuardRailConfigError(f"Guard rail config {path} must be a mapping of settings")

    result = validate_guardrail_config(raw)
    for warning in result["warnings"]:
        logger.warning(f"{path}: {warning}")
    if not result["valid"]:
        raise GuardRailConfigError(
            f"Invalid guard rail config {path}:\n" + "\n".join(f"  - {e}" for e in result["errors"])
        )

    try:
        config = GuardRailConfig(**normalize_config_keys(raw))
    except ValidationError as e:
        raise GuardRailConfigError(f"Invalid guard rail config {path}: {e}") from e

    logger.info(
        f"Loaded guard rail config from {path}: max_cluster_count={config.max_cluster_count}, "
        f"approved_instance_sizes={list(config.approved_instance_sizes)}, "
        f"require_backup_enabled={config.require_backup_enabled}"
    )
    return config


__all__ = [
    "GuardRailConfig",
    "GuardRailConfigError",
    "normalize_config_keys",
    "validate_guardrail_config",
    "load_guardrail_config",
]
