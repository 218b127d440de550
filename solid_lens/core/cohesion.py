"""Single Responsibility analysis via LCOM4 (lack of cohesion of methods)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from .config import DEFAULT_SRP_LCOM4_THRESHOLD
from .models import ClassRecord, LCOM4Result, MethodRecord, SourceModel

EXTRACTED_CLASS_SUFFIXES = ["Core", "Manager", "Handler", "Service", "Processor", "Builder", "Factory", "Provider"]


def suggested_suffix(index: int, total: int) -> str:
    """Suffix for the class extracted from the `index`-th method group."""
    if total == 2:
        return "Core" if index == 0 else "Helper"
    return EXTRACTED_CLASS_SUFFIXES[index % len(EXTRACTED_CLASS_SUFFIXES)]


@dataclass
class CohesionAnalyzer:
    threshold: int = DEFAULT_SRP_LCOM4_THRESHOLD

    def analyze_model(self, model: SourceModel) -> List[LCOM4Result]:
        results = [self.analyze(record) for record in model.classes]
        logging.debug("SRP: analyzed %d classes", len(results))
        return results

    def violations(self, results: List[LCOM4Result]) -> List[LCOM4Result]:
        return [r for r in results if self.is_violation(r)]

    def is_violation(self, result: LCOM4Result) -> bool:
        return result.lcom4_value > self.threshold

    def analyze(self, record: ClassRecord) -> LCOM4Result:
        methods = [m for m in record.methods if not m.name.startswith("__") or m.name == "__init__"]

        if len(methods) <= 1:
            return LCOM4Result(
                class_name=record.name,
                start_line=record.start_line,
                lcom4_value=1,
                connected_components=[[m.name for m in methods]],
                suggestion="Class has 0 or 1 method, LCOM4 is trivially 1.",
            )

        adjacency = self._build_graph(methods)
        components = self._connected_components(adjacency)
        return LCOM4Result(
            class_name=record.name,
            start_line=record.start_line,
            lcom4_value=len(components),
            connected_components=components,
            suggestion=self._suggestion(components),
        )

    @staticmethod
    def _build_graph(methods: List[MethodRecord]) -> Dict[str, List[str]]:
        # Insertion order of the dict is the first-encounter order of methods
        adjacency: Dict[str, List[str]] = {}
        for method in methods:
            adjacency.setdefault(method.name, [])

        for i, first in enumerate(methods):
            for second in methods[i + 1:]:
                shares_state = not first.used_variables.isdisjoint(second.used_variables)
                calls = second.name in first.called_methods or first.name in second.called_methods
                if shares_state or calls:
                    if second.name not in adjacency[first.name]:
                        adjacency[first.name].append(second.name)
                    if first.name not in adjacency[second.name]:
                        adjacency[second.name].append(first.name)
        return adjacency

    @staticmethod
    def _connected_components(adjacency: Dict[str, List[str]]) -> List[List[str]]:
        order = {name: index for index, name in enumerate(adjacency)}
        visited: set[str] = set()
        components: List[List[str]] = []

        for start in adjacency:
            if start in visited:
                continue
            component: List[str] = []
            stack = [start]
            while stack:
                current = stack.pop()
                if current in visited:
                    continue
                visited.add(current)
                component.append(current)
                stack.extend(n for n in adjacency[current] if n not in visited)
            components.append(sorted(component, key=order.__getitem__))
        return components

    @staticmethod
    def _suggestion(components: List[List[str]]) -> str:
        if len(components) <= 1:
            return "Class appears to be cohesive."
        groups = "; ".join(f"Group {idx + 1}: {', '.join(component)}" for idx, component in enumerate(components))
        return f"Consider splitting into {len(components)} classes. Method groups: {groups}"
