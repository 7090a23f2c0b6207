import pytest

from atlas_guardrails.core.governance.config import GuardRailConfig
from atlas_guardrails.core.governance.diagnostics import DiagnosticCollector, Severity, ViolationCode
from atlas_guardrails.core.governance.guard_rails import AtlasGuardRailAspect, TraversalState
from atlas_guardrails.core.governance.resources import (
    AdvancedRegionConfig,
    AdvancedReplicationSpec,
    ClusterNode,
    ClusterProperties,
    ConstructNode,
    ResourceKind,
    Specs,
    walk,
)


def make_cluster(path, backup_enabled=True, regions=(("M10", None, None),)):
    region_configs = [
        AdvancedRegionConfig(
            electable_specs=Specs(instance_size=electable) if electable else None,
            read_only_specs=Specs(instance_size=read_only) if read_only else None,
            analytics_specs=Specs(instance_size=analytics) if analytics else None,
        )
        for electable, read_only, analytics in regions
    ]
    return ClusterNode(
        path=path,
        properties=ClusterProperties(
            backup_enabled=backup_enabled,
            replication_specs=[AdvancedReplicationSpec(advanced_region_configs=region_configs)],
        ),
    )


def make_aspect(max_cluster_count=3, approved=("M10", "M20", "M30"), require_backup=True):
    config = GuardRailConfig(
        max_cluster_count=max_cluster_count,
        approved_instance_sizes=list(approved),
        require_backup_enabled=require_backup,
    )
    collector = DiagnosticCollector()
    return AtlasGuardRailAspect(config, collector), collector


def test_traversal_state_counts_up():
    state = TraversalState()
    assert state.match_count == 0
    assert state.record_match() == 1
    assert state.record_match() == 2
    assert state.match_count == 2


def test_new_aspect_starts_at_zero():
    aspect, collector = make_aspect()
    assert aspect.match_count == 0
    assert len(collector) == 0


def test_default_sink_is_collector():
    aspect = AtlasGuardRailAspect(GuardRailConfig())
    aspect.visit(make_cluster("C1", backup_enabled=False))
    assert isinstance(aspect.sink, DiagnosticCollector)
    assert len(aspect.sink.warnings) == 1


@pytest.mark.parametrize("properties", [
    {},
    {"backup_enabled": False, "replication_specs": "not-a-list"},
    {"replication_specs": [{"advanced_region_configs": None}], "garbage": object()},
])
def test_non_cluster_nodes_are_ignored(properties):
    aspect, collector = make_aspect(max_cluster_count=0, approved=("M10",))
    for kind in (ResourceKind.STACK, ResourceKind.PROJECT, ResourceKind.CONSTRUCT, ResourceKind.OUTPUT):
        aspect.visit(ConstructNode(kind=kind, path=f"Stage/{kind.value}", properties=properties))
    assert aspect.match_count == 0
    assert collector.diagnostics == []


def test_match_count_equals_clusters_visited():
    aspect, _ = make_aspect(max_cluster_count=10)
    nodes = [
        ConstructNode(kind=ResourceKind.STACK, path="S"),
        make_cluster("S/C1"),
        ConstructNode(kind=ResourceKind.PARAMETER, path="S/P"),
        make_cluster("S/C2"),
        make_cluster("S/C3"),
    ]
    for node in reversed(nodes):
        aspect.visit(node)
    assert aspect.match_count == 3


@pytest.mark.parametrize("limit,total", [(1, 3), (2, 5), (3, 3), (4, 2)])
def test_only_clusters_beyond_limit_are_flagged(limit, total):
    aspect, collector = make_aspect(max_cluster_count=limit)
    paths = [f"Stage/Cluster{i}" for i in range(1, total + 1)]
    for path in paths:
        aspect.visit(make_cluster(path))

    flagged = [d.node_path for d in collector.diagnostics if d.code == ViolationCode.CARDINALITY_EXCEEDED]
    assert flagged == paths[limit:]


def test_limit_zero_flags_every_cluster():
    aspect, collector = make_aspect(max_cluster_count=0)
    aspect.visit(make_cluster("A"))
    aspect.visit(make_cluster("B"))
    errors = collector.errors
    assert [d.node_path for d in errors] == ["A", "B"]
    assert "already defines 0 cluster(s); adding 'A' exceeds the limit of 0" in errors[0].message
    assert "already defines 1 cluster(s); adding 'B' exceeds the limit of 0" in errors[1].message


def test_backup_false_emits_exactly_one_warning():
    aspect, collector = make_aspect()
    aspect.visit(make_cluster("C", backup_enabled=False))
    assert len(collector.diagnostics) == 1
    assert collector.diagnostics[0].severity == Severity.WARNING
    assert collector.diagnostics[0].code == ViolationCode.MISSING_REQUIRED_FLAG


def test_backup_absent_emits_warning():
    aspect, collector = make_aspect()
    aspect.visit(make_cluster("C", backup_enabled=None))
    assert len(collector.warnings) == 1


@pytest.mark.parametrize("backup_enabled", [1, 0, "yes", {}])
def test_non_boolean_backup_flag_in_decoded_tree_warns(backup_enabled):
    tree = ConstructNode.model_validate({
        "kind": "stage",
        "path": "S",
        "children": [
            {"kind": "atlas_cluster", "path": "S/C", "properties": {"backup_enabled": backup_enabled}},
        ],
    })
    aspect, collector = make_aspect()
    for node in walk(tree):
        aspect.visit(node)
    assert aspect.match_count == 1
    assert len(collector.diagnostics) == 1
    assert collector.diagnostics[0].code == ViolationCode.MISSING_REQUIRED_FLAG
    assert collector.diagnostics[0].node_path == "S/C"


def test_cluster_without_properties_is_still_checked():
    node = ClusterNode.model_construct(path="C", properties=None)
    aspect, collector = make_aspect()
    aspect.visit(node)
    assert aspect.match_count == 1
    assert [d.code for d in collector.diagnostics] == [ViolationCode.MISSING_REQUIRED_FLAG]


def test_backup_not_required():
    aspect, collector = make_aspect(require_backup=False)
    aspect.visit(make_cluster("C1", backup_enabled=False))
    aspect.visit(make_cluster("C2", backup_enabled=None))
    assert collector.diagnostics == []


def test_empty_approved_list_never_fires():
    aspect, collector = make_aspect(approved=())
    aspect.visit(make_cluster("C", regions=(("M700", "R80", "X1"),)))
    assert collector.diagnostics == []


def test_unapproved_sizes_reported_once_per_cluster():
    aspect, collector = make_aspect(approved=("M10", "M20"))
    aspect.visit(make_cluster("C", regions=(("M10", "M30", "M30"), ("M20", None, None))))
    assert len(collector.diagnostics) == 1
    diagnostic = collector.diagnostics[0]
    assert diagnostic.code == ViolationCode.UNAPPROVED_VALUE
    assert diagnostic.severity == Severity.ERROR
    assert "[M30]" in diagnostic.message
    assert diagnostic.message.count("M30") == 1
    assert diagnostic.message.endswith("Approved sizes: M10, M20.")


def test_cluster_without_replication_specs_passes_size_rule():
    aspect, collector = make_aspect(approved=("M10",))
    aspect.visit(ClusterNode(path="C", properties=ClusterProperties(backup_enabled=True)))
    assert collector.diagnostics == []
    assert aspect.match_count == 1


def test_diagnostics_carry_aspect_name():
    aspect, collector = make_aspect(require_backup=True)
    aspect.visit(make_cluster("C", backup_enabled=False))
    assert collector.diagnostics[0].aspect == AtlasGuardRailAspect.name


def test_visit_does_not_modify_node():
    aspect, _ = make_aspect(max_cluster_count=0, approved=("M10",))
    node = make_cluster("C", backup_enabled=False, regions=(("M40", None, None),))
    before = node.model_dump()
    aspect.visit(node)
    assert node.model_dump() == before


def test_end_to_end_scenario():
    aspect, collector = make_aspect(max_cluster_count=1, approved=("M10",), require_backup=True)

    aspect.visit(make_cluster("Stage/A", backup_enabled=True, regions=(("M10", None, None),)))
    assert collector.diagnostics == []

    aspect.visit(make_cluster("Stage/B", backup_enabled=False, regions=(("M20", None, None),)))
    findings = collector.for_path("Stage/B")
    assert [(d.code, d.severity) for d in findings] == [
        (ViolationCode.CARDINALITY_EXCEEDED, Severity.ERROR),
        (ViolationCode.MISSING_REQUIRED_FLAG, Severity.WARNING),
        (ViolationCode.UNAPPROVED_VALUE, Severity.ERROR),
    ]
    assert findings[0].message.endswith("exceeds the limit of 1.")
    assert "[M20]" in findings[2].message
    assert findings[2].message.endswith("Approved sizes: M10.")


def test_full_tree_traversal():
    stack = ConstructNode(
        kind=ResourceKind.STACK,
        path="Stage/Stack",
        children=[make_cluster(f"Stage/Stack/C{i}") for i in range(3)],
    )
    tree = ConstructNode(kind=ResourceKind.STAGE, path="Stage", children=[stack])
    aspect, collector = make_aspect(max_cluster_count=2)
    for node in walk(tree):
        aspect.visit(node)
    assert aspect.match_count == 3
    assert [d.node_path for d in collector.errors] == ["Stage/Stack/C2"]
