import pytest

from atlas_guardrails.core.governance.config import GuardRailConfig
from atlas_guardrails.core.governance.diagnostics import Severity, ViolationCode
from atlas_guardrails.core.governance.resources import (
    AdvancedRegionConfig,
    AdvancedReplicationSpec,
    ClusterNode,
    ClusterProperties,
    Specs,
)
from atlas_guardrails.core.governance.rules import (
    AllOfRule,
    ApprovedInstanceSizeRule,
    BackupRequiredRule,
    ClusterCountRule,
    default_rules,
)


def make_cluster(path="Stage/Stack/Cluster", backup_enabled=True, sizes=("M10",)):
    regions = [AdvancedRegionConfig(electable_specs=Specs(instance_size=size)) for size in sizes]
    return ClusterNode(
        path=path,
        properties=ClusterProperties(
            backup_enabled=backup_enabled,
            replication_specs=[AdvancedReplicationSpec(advanced_region_configs=regions)],
        ),
    )


def test_cluster_count_within_limit():
    rule = ClusterCountRule(max_cluster_count=2)
    assert rule.evaluate(make_cluster(), 1) == []
    assert rule.evaluate(make_cluster(), 2) == []


def test_cluster_count_exceeded_message():
    rule = ClusterCountRule(max_cluster_count=2)
    findings = rule.evaluate(make_cluster(path="Stage/Stack/Third"), 3)
    assert len(findings) == 1
    finding = findings[0]
    assert finding.severity == Severity.ERROR
    assert finding.code == ViolationCode.CARDINALITY_EXCEEDED
    assert finding.node_path == "Stage/Stack/Third"
    assert finding.message == (
        "Guard rail violation: stage already defines 2 cluster(s); "
        "adding 'Stage/Stack/Third' exceeds the limit of 2."
    )


@pytest.mark.parametrize("backup_enabled", [False, None, "true", "${Token[Backup]}", 1, 0, {}])
def test_backup_required_warns_unless_literal_true(backup_enabled):
    rule = BackupRequiredRule(require_backup_enabled=True)
    findings = rule.evaluate(make_cluster(backup_enabled=backup_enabled), 1)
    assert len(findings) == 1
    assert findings[0].severity == Severity.WARNING
    assert findings[0].code == ViolationCode.MISSING_REQUIRED_FLAG
    assert "Automated backups should be enabled" in findings[0].message


def test_backup_enabled_passes():
    rule = BackupRequiredRule(require_backup_enabled=True)
    assert rule.evaluate(make_cluster(backup_enabled=True), 1) == []


@pytest.mark.parametrize("backup_enabled", [True, False, None, "false"])
def test_backup_not_required_never_fires(backup_enabled):
    rule = BackupRequiredRule(require_backup_enabled=False)
    assert rule.evaluate(make_cluster(backup_enabled=backup_enabled), 1) == []


def test_unapproved_sizes_deduplicated_and_sorted():
    rule = ApprovedInstanceSizeRule(("M20", "M10"))
    findings = rule.evaluate(make_cluster(sizes=("M50", "M10", "M30", "M50")), 1)
    assert len(findings) == 1
    assert findings[0].code == ViolationCode.UNAPPROVED_VALUE
    assert findings[0].message == (
        "Guard rail violation: instance sizes [M30, M50] are not approved. "
        "Approved sizes: M20, M10."
    )


def test_approved_sizes_pass():
    rule = ApprovedInstanceSizeRule(("M10", "M20"))
    assert rule.evaluate(make_cluster(sizes=("M10", "M20", "M10")), 1) == []


def test_empty_approved_list_means_no_restriction():
    rule = ApprovedInstanceSizeRule(())
    assert rule.evaluate(make_cluster(sizes=("M700", "R40")), 1) == []


def test_cluster_without_sizes_passes():
    rule = ApprovedInstanceSizeRule(("M10",))
    assert rule.evaluate(ClusterNode(path="Bare"), 1) == []


def test_and_combines_rules_in_order():
    combined = ClusterCountRule(0) & BackupRequiredRule(True) & ApprovedInstanceSizeRule(("M10",))
    assert isinstance(combined, AllOfRule)
    assert len(combined.rules) == 3
    findings = combined.evaluate(make_cluster(backup_enabled=False, sizes=("M20",)), 1)
    assert [f.code for f in findings] == [
        ViolationCode.CARDINALITY_EXCEEDED,
        ViolationCode.MISSING_REQUIRED_FLAG,
        ViolationCode.UNAPPROVED_VALUE,
    ]


def test_default_rules_follow_config():
    config = GuardRailConfig(max_cluster_count=5, approved_instance_sizes=[], require_backup_enabled=False)
    rules = default_rules(config)
    assert rules.evaluate(make_cluster(backup_enabled=False, sizes=("M99",)), 5) == []
