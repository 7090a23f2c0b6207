# atlas_guardrails/constants.py
"""
Guard rail defaults and fixed values for Atlas cluster governance.
"""

from typing import Final, Tuple

# ============================================================================
# GUARD RAIL DEFAULTS
# ============================================================================

DEFAULT_MAX_CLUSTER_COUNT: Final[int] = 3
DEFAULT_APPROVED_INSTANCE_SIZES: Final[Tuple[str, ...]] = ("M10", "M20", "M30")
DEFAULT_REQUIRE_BACKUP_ENABLED: Final[bool] = True

# ============================================================================
# CLUSTER STACK
# ============================================================================

# Sizes accepted by the AtlasClusterInstanceSize parameter
ALLOWED_INSTANCE_SIZES: Final[Tuple[str, ...]] = ("M10", "M20", "M30")
DEFAULT_STAGE_ID: Final[str] = "MongoDbAtlasStage"
DEFAULT_STACK_ID: Final[str] = "MongoDbAtlasStack"
CLUSTER_TYPE_REPLICASET: Final[str] = "REPLICASET"
ELECTABLE_NODE_COUNT: Final[int] = 3
ACCESS_LIST_COMMENT: Final[str] = "Managed by AWS CDK guard-railed deployment."

# ============================================================================
# FILE LOCATIONS
# ============================================================================

DEFAULT_PARAMETERS_FILE: Final[str] = "config/atlas-parameters.json"
EXAMPLE_PARAMETERS_FILE: Final[str] = "config/atlas-parameters.example.json"

__all__ = [
    "DEFAULT_MAX_CLUSTER_COUNT",
    "DEFAULT_APPROVED_INSTANCE_SIZES",
    "DEFAULT_REQUIRE_BACKUP_ENABLED",
    "ALLOWED_INSTANCE_SIZES",
    "DEFAULT_STAGE_ID",
    "DEFAULT_STACK_ID",
    "CLUSTER_TYPE_REPLICASET",
    "ELECTABLE_NODE_COUNT",
    "ACCESS_LIST_COMMENT",
    "DEFAULT_PARAMETERS_FILE",
    "EXAMPLE_PARAMETERS_FILE",
]
