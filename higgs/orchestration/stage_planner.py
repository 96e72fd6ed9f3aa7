"""Stage planner for dependency-aware crawl ordering.

Child stages read their identifiers from collections written by parent
stages, so every parent must finish before a child starts. Ties are broken
by registry order, which gives the familiar
regions -> constellations -> systems -> children -> types/groups/categories
sequence for a full run.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..stages import STAGES, get_stage


@dataclass
class CrawlStep:
    """A single step in the crawl plan."""

    stage_name: str
    reason: str = ""  # Why this step was added (for debugging)

    @property
    def is_dependency(self) -> bool:
        return self.reason == "Dependency"


@dataclass
class CrawlPlan:
    """Complete crawl plan with ordered steps."""

    steps: list[CrawlStep] = field(default_factory=list)
    requested_stages: list[str] = field(default_factory=list)
    dependency_stages: list[str] = field(default_factory=list)

    @property
    def stage_names(self) -> list[str]:
        """Get all stage names in order."""
        return [step.stage_name for step in self.steps]


def _registry_index(stage_name: str) -> int:
    order = list(STAGES.keys())
    return order.index(stage_name) if stage_name in order else len(order)


class StagePlanner:
    """Plans crawl order based on stage dependencies.

    Uses Kahn's algorithm so parents are crawled before the stages that
    derive their identifiers from them.
    """

    def __init__(self, include_dependencies: bool = True):
        """Initialize the planner.

        Args:
            include_dependencies: If True, pull in the parents of requested
                stages. If False, only plan what was requested.
        """
        self._include_dependencies = include_dependencies

    def plan(self, requested_stages: Optional[list[str]] = None) -> CrawlPlan:
        """Create a crawl plan.

        Args:
            requested_stages: Stage names to run. None means every stage.

        Returns:
            CrawlPlan with topologically sorted steps.

        Raises:
            ValueError: If a stage name is unknown.

        Example:
            Input: ["moons"]
            Output plan steps:
            1. regions (Dependency)
            2. constellations (Dependency)
            3. systems (Dependency)
            4. moons (Requested)
        """
        if requested_stages is None:
            requested_stages = list(STAGES.keys())

        for name in requested_stages:
            get_stage(name)

        requested = set(requested_stages)
        plan = CrawlPlan(requested_stages=sorted(requested, key=_registry_index))

        all_stages = set(requested)
        dependency_stages = set()

        if self._include_dependencies:
            to_process = list(requested)
            processed = set()

            while to_process:
                stage_name = to_process.pop(0)
                if stage_name in processed:
                    continue
                processed.add(stage_name)

                for dep in get_stage(stage_name).dependencies:
                    all_stages.add(dep)
                    if dep not in requested:
                        dependency_stages.add(dep)
                    if dep not in processed:
                        to_process.append(dep)

        plan.dependency_stages = sorted(dependency_stages, key=_registry_index)

        for stage_name in self._topological_sort(all_stages):
            reason = "Requested" if stage_name in requested else "Dependency"
            plan.steps.append(CrawlStep(stage_name=stage_name, reason=reason))

        return plan

    def _build_graph(
        self, stages: set[str]
    ) -> tuple[dict[str, int], dict[str, list[str]]]:
        # Edge from A to B means B depends on A
        in_degree: dict[str, int] = {s: 0 for s in stages}
        graph: dict[str, list[str]] = {s: [] for s in stages}

        for stage_name in stages:
            for dep in get_stage(stage_name).dependencies:
                if dep in stages:
                    graph[dep].append(stage_name)
                    in_degree[stage_name] += 1

        return in_degree, graph

    def _topological_sort(self, stages: set[str]) -> list[str]:
        """Sort stages so dependencies come first, ties in registry order."""
        in_degree, graph = self._build_graph(stages)

        queue = sorted((s for s in stages if in_degree[s] == 0), key=_registry_index)
        result = []

        while queue:
            current = queue.pop(0)
            result.append(current)

            for dependent in graph[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

            queue.sort(key=_registry_index)

        # Cycles can't come from the registry, but keep every stage
        remaining = sorted((s for s in stages if s not in result), key=_registry_index)
        result.extend(remaining)

        return result

    def get_dependency_layers(self, stages: set[str]) -> list[list[str]]:
        """Group stages into dependency layers for phased execution.

        Stages in a layer only depend on earlier layers and may run
        concurrently.

        Example:
            Input: {"regions", "constellations", "systems", "stars", "types"}
            Output: [
                ["regions", "types"],
                ["constellations"],
                ["systems"],
                ["stars"],
            ]
        """
        in_degree, graph = self._build_graph(stages)

        layers: list[list[str]] = []
        current_layer = sorted(
            (s for s in stages if in_degree[s] == 0), key=_registry_index
        )

        while current_layer:
            layers.append(current_layer)

            next_layer = []
            for stage_name in current_layer:
                for dependent in graph[stage_name]:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        next_layer.append(dependent)

            current_layer = sorted(next_layer, key=_registry_index)

        processed = {s for layer in layers for s in layer}
        remaining = sorted((s for s in stages if s not in processed), key=_registry_index)
        if remaining:
            layers.append(remaining)

        return layers

    def validate_dependencies(self, stage_names: list[str]) -> dict[str, list[str]]:
        """Check which requested stages are missing their parents.

        Returns:
            Dict mapping stage names to missing dependencies. Empty dict means
            every dependency is part of the run.
        """
        missing: dict[str, list[str]] = {}
        stage_set = set(stage_names)

        for stage_name in stage_names:
            missing_deps = [
                dep for dep in get_stage(stage_name).dependencies if dep not in stage_set
            ]
            if missing_deps:
                missing[stage_name] = missing_deps

        return missing
