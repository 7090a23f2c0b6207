# atlas_guardrails/core/governance/rules.py
"""
Guard Rail Rules – Composable checks applied to a single Atlas cluster.

Each rule looks only at the cluster under evaluation and at the number of
clusters seen so far in the traversal. Rules return findings instead of
raising; they can be combined with ``&`` to run several checks in a fixed
order and concatenate their findings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from atlas_guardrails.core.governance.config import GuardRailConfig
from atlas_guardrails.core.governance.diagnostics import Diagnostic, Severity, ViolationCode
from atlas_guardrails.core.governance.resources import (
    AdvancedRegionConfig,
    AdvancedReplicationSpec,
    ClusterNode,
    ClusterProperties,
)

Findings = List[Diagnostic]

# -----------------------------------------------------------------------------
# Instance size extraction
# -----------------------------------------------------------------------------
def cluster_properties(cluster: ClusterNode) -> ClusterProperties:
    """Properties of ``cluster``, empty when the node carries none."""
    return cluster.properties if cluster.properties is not None else ClusterProperties()


def collect_sizes_from_region(region: AdvancedRegionConfig) -> List[str]:
    """Instance sizes declared by one region, in electable, read-only, analytics order."""
    sizes = []
    for specs in (region.electable_specs, region.read_only_specs, region.analytics_specs):
        if specs is not None and specs.instance_size:
            sizes.append(specs.instance_size)
    return sizes


def extract_instance_sizes(replication_specs: Optional[List[AdvancedReplicationSpec]]) -> List[str]:
    """
    Flatten every instance size referenced by a cluster's replication specs.

    Missing replication specs, region configs or node specs simply contribute
    nothing. Duplicates are kept.
    """
    if not replication_specs:
        return []

    sizes: List[str] = []
    for spec in replication_specs:
        for region in spec.advanced_region_configs or []:
            sizes.extend(collect_sizes_from_region(region))
    return sizes

# -----------------------------------------------------------------------------
# Abstract rule
# -----------------------------------------------------------------------------
class GuardRailRule(ABC):
    """Abstract base for all rules. Evaluates one cluster and returns findings."""

    code: ViolationCode

    @abstractmethod
    def evaluate(self, cluster: ClusterNode, match_count: int) -> Findings:
        """Return findings for ``cluster``. ``match_count`` includes the cluster itself."""
        pass

    def __and__(self, other: GuardRailRule) -> GuardRailRule:
        """Run both rules, this one first."""
        return AllOfRule((self, other))


@dataclass(frozen=True)
class AllOfRule(GuardRailRule):
    """Ordered conjunction of rules; findings are concatenated."""
    rules: tuple

    def evaluate(self, cluster: ClusterNode, match_count: int) -> Findings:
        findings: Findings = []
        for rule in self.rules:
            findings.extend(rule.evaluate(cluster, match_count))
        return findings

    def __and__(self, other: GuardRailRule) -> GuardRailRule:
        return AllOfRule(self.rules + (other,))

# -----------------------------------------------------------------------------
# Atomic rules
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ClusterCountRule(GuardRailRule):
    """Reject every cluster beyond the configured maximum for the stage."""
    max_cluster_count: int
    code = ViolationCode.CARDINALITY_EXCEEDED

    def evaluate(self, cluster: ClusterNode, match_count: int) -> Findings:
        if match_count <= self.max_cluster_count:
            return []
        return [Diagnostic(
            severity=Severity.ERROR,
            node_path=cluster.path,
            code=self.code,
            message=(
                f"Guard rail violation: stage already defines {match_count - 1} cluster(s); "
                f"adding '{cluster.path}' exceeds the limit of {self.max_cluster_count}."
            ),
        )]


@dataclass(frozen=True)
class BackupRequiredRule(GuardRailRule):
    """Warn when automated backups are not explicitly enabled."""
    require_backup_enabled: bool
    code = ViolationCode.MISSING_REQUIRED_FLAG

    def evaluate(self, cluster: ClusterNode, match_count: int) -> Findings:
        # Only a literal True satisfies the rule; tokens and absent values do not
        if not self.require_backup_enabled or cluster_properties(cluster).backup_enabled is True:
            return []
        return [Diagnostic(
            severity=Severity.WARNING,
            node_path=cluster.path,
            code=self.code,
            message="Guard rail warning: Automated backups should be enabled for Atlas clusters.",
        )]


@dataclass(frozen=True)
class ApprovedInstanceSizeRule(GuardRailRule):
    """Reject clusters that reference instance sizes outside the approved list."""
    approved_instance_sizes: tuple
    code = ViolationCode.UNAPPROVED_VALUE

    def evaluate(self, cluster: ClusterNode, match_count: int) -> Findings:
        if not self.approved_instance_sizes:
            return []

        approved = set(self.approved_instance_sizes)
        sizes = extract_instance_sizes(cluster_properties(cluster).replication_specs)
        unauthorized = sorted({size for size in sizes if size not in approved})
        if not unauthorized:
            return []
        return [Diagnostic(
            severity=Severity.ERROR,
            node_path=cluster.path,
            code=self.code,
            message=(
                f"Guard rail violation: instance sizes [{', '.join(unauthorized)}] are not approved. "
                f"Approved sizes: {', '.join(self.approved_instance_sizes)}."
            ),
        )]


def default_rules(config: GuardRailConfig) -> GuardRailRule:
    """The guard rails in evaluation order: cluster count, backups, instance sizes."""
    return (
        ClusterCountRule(config.max_cluster_count)
        & BackupRequiredRule(config.require_backup_enabled)
        & ApprovedInstanceSizeRule(tuple(config.approved_instance_sizes))
    )


__all__ = [
    "Findings",
    "GuardRailRule",
    "AllOfRule",
    "ClusterCountRule",
    "BackupRequiredRule",
    "ApprovedInstanceSizeRule",
    "default_rules",
    "cluster_properties",
    "collect_sizes_from_region",
    "extract_instance_sizes",
]
