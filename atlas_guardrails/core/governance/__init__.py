# atlas_guardrails/core/governance/__init__.py
"""
Atlas Guard Rails – Governance engine
Validates synthesized Atlas clusters against organizational policy before deployment.
"""

from .resources import (
    ResourceKind,
    ProviderName,
    Specs,
    AdvancedRegionConfig,
    AdvancedReplicationSpec,
    ClusterProperties,
    ClusterNode,
    ConstructNode,
    ResourceNode,
    walk,
    find,
)
from .config import (
    GuardRailConfig,
    GuardRailConfigError,
    load_guardrail_config,
    validate_guardrail_config,
)
from .diagnostics import (
    Severity,
    ViolationCode,
    Diagnostic,
    DiagnosticSink,
    DiagnosticCollector,
    LoggingSink,
    EnforcementMode,
    is_blocking,
)
from .rules import (
    GuardRailRule,
    ClusterCountRule,
    BackupRequiredRule,
    ApprovedInstanceSizeRule,
    default_rules,
    cluster_properties,
    extract_instance_sizes,
)
from .guard_rails import TraversalState, AtlasGuardRailAspect
from .stage import GuardRailStage, GuardRailReport, DeploymentBlockedError

__all__ = [
    # Tree model
    "ResourceKind",
    "ProviderName",
    "Specs",
    "AdvancedRegionConfig",
    "AdvancedReplicationSpec",
    "ClusterProperties",
    "ClusterNode",
    "ConstructNode",
    "ResourceNode",
    "walk",
    "find",

    # Configuration
    "GuardRailConfig",
    "GuardRailConfigError",
    "load_guardrail_config",
    "validate_guardrail_config",

    # Diagnostics
    "Severity",
    "ViolationCode",
    "Diagnostic",
    "DiagnosticSink",
    "DiagnosticCollector",
    "LoggingSink",
    "EnforcementMode",
    "is_blocking",

    # Rules
    "GuardRailRule",
    "ClusterCountRule",
    "BackupRequiredRule",
    "ApprovedInstanceSizeRule",
    "default_rules",
    "cluster_properties",
    "extract_instance_sizes",

    # Engine
    "TraversalState",
    "AtlasGuardRailAspect",

    # Stage
    "GuardRailStage",
    "GuardRailReport",
    "DeploymentBlockedError",
]
