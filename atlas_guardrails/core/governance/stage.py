# atlas_guardrails/core/governance/stage.py
"""
Guard-Railed Stage – Host that applies aspects to a synthesized stage.

The stage walks the construct tree once, hands every node to each registered
aspect, gathers the emitted diagnostics and decides, according to its
EnforcementMode, whether the deployment must be blocked. The Atlas guard rails
are always applied; further aspects (for example a best-practice checks
library) can be registered as factories receiving the stage's sink.
"""

import logging
from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel, Field

from atlas_guardrails.core.governance.config import GuardRailConfig
from atlas_guardrails.core.governance.diagnostics import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticSink,
    EnforcementMode,
    LoggingSink,
    Severity,
    is_blocking,
)
from atlas_guardrails.core.governance.guard_rails import AtlasGuardRailAspect
from atlas_guardrails.core.governance.resources import ResourceNode, walk

logger = logging.getLogger(__name__)


class Aspect(Protocol):
    def visit(self, node: ResourceNode) -> None:
        ...


AspectFactory = Callable[[DiagnosticSink], Aspect]


class GuardRailReport(BaseModel):
    """Immutable outcome of applying the guard rails to one stage."""
    stage_path: str
    enforcement: EnforcementMode
    cluster_count: int = Field(ge=0, description="Number of Atlas clusters found in the stage")
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    blocked: bool = Field(..., description="Whether the enforcement mode stops the deployment")

    class Config:
        frozen = True

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def summary(self) -> str:
        status = "BLOCKED" if self.blocked else "passed"
        return (
            f"Guard rails {status} for {self.stage_path}: {self.cluster_count} cluster(s), "
            f"{len(self.errors)} error(s), {len(self.warnings)} warning(s) "
            f"[mode={self.enforcement.value}]"
        )


class DeploymentBlockedError(RuntimeError):
    """Raised by the stage when its enforcement mode blocks the deployment."""

    def __init__(self, report: GuardRailReport):
        self.report = report
        super().__init__(report.summary())


class GuardRailStage:
    """
    Deployment stage that applies the Atlas guard rails and any extra aspects.

    Every call to ``synth`` creates fresh aspects, so the cluster count never
    carries over from one traversal to the next.
    """

    def __init__(
        self,
        config: GuardRailConfig,
        enforcement: EnforcementMode = EnforcementMode.BLOCK_ON_ERROR,
        aspects: Optional[List[AspectFactory]] = None,
    ):
        self.guard_rail_config = config
        self.enforcement = EnforcementMode(enforcement)
        self._aspect_factories: List[AspectFactory] = list(aspects or [])

    def add_aspect(self, factory: AspectFactory) -> None:
        """Register an extra aspect, built on every synth with the stage's sink."""
        self._aspect_factories.append(factory)

    def synth(self, tree: ResourceNode, raise_on_block: bool = True) -> GuardRailReport:
        """
        Apply every aspect to ``tree`` and report the outcome.

        Raises:
            DeploymentBlockedError: if the diagnostics block the deployment and
                ``raise_on_block`` is set.
        """
        collector = DiagnosticCollector()
        sink = LoggingSink(forward_to=collector, log=logger)

        guard_rails = AtlasGuardRailAspect(self.guard_rail_config, sink)
        aspects: List[Aspect] = [guard_rails]
        aspects.extend(factory(sink) for factory in self._aspect_factories)

        for node in walk(tree):
            for aspect in aspects:
                aspect.visit(node)

        diagnostics = collector.diagnostics
        report = GuardRailReport(
            stage_path=tree.path,
            enforcement=self.enforcement,
            cluster_count=guard_rails.match_count,
            diagnostics=diagnostics,
            blocked=is_blocking(diagnostics, self.enforcement),
        )
        logger.info(report.summary())

        if report.blocked and raise_on_block:
            raise DeploymentBlockedError(report)
        return report


__all__ = [
    "Aspect",
    "AspectFactory",
    "GuardRailReport",
    "GuardRailStage",
    "DeploymentBlockedError",
]
