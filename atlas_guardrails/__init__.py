"""
Atlas Guard Rails
Governance checks for MongoDB Atlas cluster stages, applied before deployment.

This package provides:
- A tagged construct tree model for synthesized Atlas resources
- The Atlas guard rail aspect (cluster count, backups, approved instance sizes)
- A guard-railed stage host with configurable enforcement
- The Atlas cluster stack builder and parameter file handling
"""

__version__ = "1.0.0"

from .core.governance import (
    ResourceKind,
    ClusterNode,
    ConstructNode,
    ResourceNode,
    walk,
    GuardRailConfig,
    GuardRailConfigError,
    load_guardrail_config,
    Severity,
    ViolationCode,
    Diagnostic,
    DiagnosticCollector,
    EnforcementMode,
    TraversalState,
    AtlasGuardRailAspect,
    GuardRailStage,
    GuardRailReport,
    DeploymentBlockedError,
    extract_instance_sizes,
)
from .core.stacks import (
    ClusterStackParameters,
    ParameterFileError,
    build_atlas_cluster_stack,
    build_stage_tree,
    load_parameter_file,
)

__all__ = [
    "__version__",

    # Tree model
    "ResourceKind",
    "ClusterNode",
    "ConstructNode",
    "ResourceNode",
    "walk",

    # Guard rails
    "GuardRailConfig",
    "GuardRailConfigError",
    "load_guardrail_config",
    "Severity",
    "ViolationCode",
    "Diagnostic",
    "DiagnosticCollector",
    "EnforcementMode",
    "TraversalState",
    "AtlasGuardRailAspect",
    "GuardRailStage",
    "GuardRailReport",
    "DeploymentBlockedError",
    "extract_instance_sizes",

    # Stacks
    "ClusterStackParameters",
    "ParameterFileError",
    "build_atlas_cluster_stack",
    "build_stage_tree",
    "load_parameter_file",
]
