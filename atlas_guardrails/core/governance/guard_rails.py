# atlas_guardrails/core/governance/guard_rails.py
"""
Atlas Guard Rail Aspect – Stateful visitor enforcing governance on a stage.

The aspect is created once per traversal. The host calls ``visit`` for every
node of the construct tree; clusters are counted and checked, every other
construct is ignored. Violations are emitted to a diagnostic sink and never
raised, and the tree itself is never modified.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from atlas_guardrails.core.governance.config import GuardRailConfig
from atlas_guardrails.core.governance.diagnostics import DiagnosticCollector, DiagnosticSink
from atlas_guardrails.core.governance.resources import ResourceKind, ResourceNode
from atlas_guardrails.core.governance.rules import GuardRailRule, default_rules

logger = logging.getLogger(__name__)


@dataclass
class TraversalState:
    """Running totals for one traversal. Counts only grow."""
    match_count: int = 0

    def record_match(self) -> int:
        self.match_count += 1
        return self.match_count


class AtlasGuardRailAspect:
    """
    Enforce the guard rails on every Atlas cluster of a construct tree.

    Checks run in a fixed order for each cluster: cluster count, automated
    backups, approved instance sizes. The cluster count check depends on the
    order of visits, so an aspect must not be reused across traversals.
    """

    name = "AtlasGuardRails"

    def __init__(
        self,
        config: GuardRailConfig,
        sink: Optional[DiagnosticSink] = None,
        rules: Optional[GuardRailRule] = None,
    ):
        """
        Initialize the aspect.

        Args:
            config: Guard rail configuration to enforce (kept by reference).
            sink: Receiver of the emitted diagnostics. Defaults to a new collector.
            rules: Rule set to apply. Defaults to the rules derived from ``config``.
        """
        self.config = config
        self.sink = sink if sink is not None else DiagnosticCollector()
        self.state = TraversalState()
        self._rules = rules if rules is not None else default_rules(config)

    @property
    def match_count(self) -> int:
        return self.state.match_count

    def visit(self, node: ResourceNode) -> None:
        """Count and check ``node`` if it is an Atlas cluster."""
        if node.kind != ResourceKind.CLUSTER:
            return

        match_count = self.state.record_match()
        logger.debug(f"Evaluating cluster #{match_count} at {node.path}")

        for diagnostic in self._rules.evaluate(node, match_count):
            diagnostic = diagnostic.model_copy(update={"aspect": self.name})
            logger.debug(f"{self.name}: {diagnostic}")
            self.sink.emit(diagnostic)


__all__ = [
    "TraversalState",
    "AtlasGuardRailAspect",
]
