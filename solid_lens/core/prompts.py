"""
Remediation document generator.

Renders analyzer results as Markdown meant for both humans and coding
agents. Output is deterministic for a given input order so it can be diffed
and used in golden tests.
"""

from __future__ import annotations

import os
from typing import Dict, List, Sequence

from .cohesion import suggested_suffix
from .models import DIPResult, DIPViolation, ISPResult, LCOM4Result, OCPResult, OCPViolation

OCP_KIND_LABELS: Dict[str, str] = {
    "instanceof": "isinstance/instanceof checks",
    "type_equality": "type() equality checks",
    "typeof": "typeof checks",
    "type_field": "type-field conditionals",
}

ISP_KIND_LABELS: Dict[str, str] = {
    "fat_interface": "Fat Interface",
    "empty_implementation": "Empty Method",
    "not_implemented_error": "NotImplementedError",
}

OCP_SHOWN_PER_KIND = 3
DIP_SHOWN_PER_LOCATION = 5
ISP_SHOWN_ISSUES = 10


def file_label(file_path: str) -> str:
    return os.path.basename(file_path)


def build_srp_prompt(results: Sequence[LCOM4Result], file_path: str) -> str:
    prompt = "# Single Responsibility Principle Violation Analysis\n\n"
    prompt += f"**File:** {file_label(file_path)}\n\n"
    prompt += "The following class(es) may violate the Single Responsibility Principle based on LCOM4 analysis:\n\n"

    for result in results:
        prompt += f"## Class: {result.class_name}\n"
        prompt += f"- **LCOM4 Score:** {result.lcom4_value} (ideal is 1)\n"
        prompt += f"- **Connected Components:** {result.lcom4_value}\n\n"
        prompt += "### Method Groups (disconnected responsibilities):\n"
        for i, component in enumerate(result.connected_components):
            prompt += f"{i + 1}. **Responsibility {i + 1}:** {', '.join(component)}\n"

        prompt += "\n### Recommended Refactoring:\n"
        prompt += (
            f"This class has {result.lcom4_value} disconnected groups of methods "
            "that don't share state or call each other. "
        )
        prompt += "Consider extracting each group into its own class:\n\n"
        total = len(result.connected_components)
        for i, component in enumerate(result.connected_components):
            suggested_name = f"{result.class_name}{suggested_suffix(i, total)}"
            prompt += f"- Create `{suggested_name}` with methods: {', '.join(component)}\n"
        prompt += "\n"

    prompt += "---\n"
    prompt += "**Action Required:** Please refactor the above class(es) to follow the Single Responsibility Principle. "
    prompt += "Each new class should have one clear responsibility and all its methods should be cohesive (working on the same data/state).\n"
    return prompt


def _group_by_kind(violations: Sequence[OCPViolation]) -> Dict[str, List[OCPViolation]]:
    grouped: Dict[str, List[OCPViolation]] = {}
    for violation in violations:
        grouped.setdefault(violation.kind, []).append(violation)
    return grouped


def build_ocp_prompt(results: Sequence[OCPResult], file_path: str) -> str:
    prompt = "# Open/Closed Principle Violation Analysis\n\n"
    prompt += f"**File:** {file_label(file_path)}\n\n"
    prompt += "The following method(s) may violate the Open/Closed Principle:\n\n"

    for result in results:
        prompt += f"## Class: {result.class_name}, Method: {result.method_name}\n"
        prompt += f"- **OCP Score:** {result.ocp_score:.1f} (threshold exceeded)\n"
        prompt += f"- **Type-Check Density (TCD):** {result.tcd * 100:.1f}%\n"
        prompt += f"- **Type-Field Switch Count (TFSC):** {result.tfsc}\n\n"

        prompt += "### Detected Violations:\n"
        for kind, items in _group_by_kind(result.violations).items():
            prompt += f"- **{OCP_KIND_LABELS.get(kind, OCP_KIND_LABELS['type_field'])}:** {len(items)}\n"
            for item in items[:OCP_SHOWN_PER_KIND]:
                prompt += f"  - Line {item.line + 1}: `{item.code}`\n"
            if len(items) > OCP_SHOWN_PER_KIND:
                prompt += f"  - ... and {len(items) - OCP_SHOWN_PER_KIND} more\n"

        prompt += "\n### Recommended Refactoring:\n"
        prompt += f"{result.suggestion}\n\n"
        prompt += "**Patterns to consider:**\n"
        prompt += "1. **Strategy Pattern:** Extract each type-specific behavior into separate strategy classes\n"
        prompt += "2. **Polymorphism:** Move behavior into subclasses and use method overriding\n"
        prompt += "3. **Visitor Pattern:** If operations vary independently from object structure\n"
        prompt += "4. **Factory + Registry:** Register handlers for each type dynamically\n\n"

    prompt += "---\n"
    prompt += "**Action Required:** Refactor to eliminate type-checking conditionals. "
    prompt += "New types should be addable without modifying existing code.\n"
    return prompt


def _dip_sites(title: str, sites: Sequence[DIPViolation]) -> str:
    if not sites:
        return ""
    text = f"\n**{title}:**\n"
    for site in sites[:DIP_SHOWN_PER_LOCATION]:
        text += f"- Line {site.line + 1}: `{site.class_name}` - `{site.code}`\n"
    if len(sites) > DIP_SHOWN_PER_LOCATION:
        text += f"- ... and {len(sites) - DIP_SHOWN_PER_LOCATION} more\n"
    return text


def build_dip_prompt(results: Sequence[DIPResult], file_path: str) -> str:
    prompt = "# Dependency Inversion Principle Violation Analysis\n\n"
    prompt += f"**File:** {file_label(file_path)}\n\n"
    prompt += "The following class(es) may violate the Dependency Inversion Principle:\n\n"

    for result in results:
        prompt += f"## Class: {result.class_name}\n"
        prompt += f"- **DIP Score:** {result.dip_score:.1f} (threshold exceeded)\n"
        prompt += f"- **Dependency Injection Index (DII):** {result.dii * 100:.0f}% (100% = all injected)\n"
        prompt += f"- **Constructor Instantiations:** {result.constructor_instantiations}\n"
        prompt += f"- **Method Instantiations:** {result.method_instantiations}\n"
        prompt += f"- **Injected Dependencies:** {result.injected_dependencies}\n\n"

        if result.violations:
            prompt += "### Direct Instantiations Found:\n"
            prompt += _dip_sites("In Constructor", [v for v in result.violations if v.kind == "constructor_instantiation"])
            prompt += _dip_sites("In Methods", [v for v in result.violations if v.kind == "method_instantiation"])

        prompt += "\n### Recommended Refactoring:\n"
        prompt += f"{result.suggestion}\n\n"
        prompt += "**Steps to fix:**\n"
        prompt += "1. Create abstractions (interfaces/protocols) for each concrete dependency\n"
        prompt += "2. Add constructor parameters to receive dependencies\n"
        prompt += "3. Have concrete classes implement the abstractions\n"
        prompt += "4. Inject dependencies from calling code or use a DI container\n\n"

    prompt += "---\n"
    prompt += "**Action Required:** Refactor to inject dependencies instead of creating them internally. "
    prompt += "High-level modules should depend on abstractions, not concrete implementations.\n"
    return prompt


def build_isp_prompt(results: Sequence[ISPResult], file_path: str) -> str:
    prompt = "# Interface Segregation Principle Violation Analysis\n\n"
    prompt += f"**File:** {file_label(file_path)}\n\n"
    prompt += "The following class(es)/interface(s) may violate the Interface Segregation Principle:\n\n"

    for result in results:
        if result.is_interface:
            prompt += f"## Interface: {result.class_name} (Fat Interface)\n"
            prompt += f"- **Abstract Method Count (IFS):** {result.abstract_method_count}\n"
            prompt += "- **Recommended:** Split into smaller interfaces with 3-5 methods each\n\n"
        else:
            prompt += f"## Class: {result.class_name} (Forced Implementation)\n"
            prompt += f"- **Stub Implementation Ratio (SIR):** {result.sir * 100:.0f}%\n"
            prompt += f"- **Empty Implementations:** {result.empty_implementations}\n"
            prompt += f"- **NotImplementedError Methods:** {result.not_implemented_errors}\n\n"

        if result.violations:
            prompt += "### Detected Issues:\n"
            for violation in result.violations[:ISP_SHOWN_ISSUES]:
                label = ISP_KIND_LABELS.get(violation.kind, "NotImplementedError")
                if violation.method_name:
                    prompt += f"- **{label}:** `{violation.method_name}` at line {violation.line + 1}\n"
                else:
                    prompt += f"- **{label}:** {violation.code}\n"
            if len(result.violations) > ISP_SHOWN_ISSUES:
                prompt += f"- ... and {len(result.violations) - ISP_SHOWN_ISSUES} more\n"

        prompt += "\n### Recommended Refactoring:\n"
        prompt += f"{result.suggestion}\n\n"

    prompt += "---\n"
    prompt += "**Action Required:** Split large interfaces into smaller, role-specific interfaces. "
    prompt += "Classes should only implement interfaces whose methods they actually use.\n"
    return prompt


def build_combined_report(file_path: str,
                          srp: Sequence[LCOM4Result] = (),
                          ocp: Sequence[OCPResult] = (),
                          dip: Sequence[DIPResult] = (),
                          isp: Sequence[ISPResult] = ()) -> str:
    """Concatenate the documents of every principle that has flagged results."""
    sections = []
    if srp:
        sections.append(build_srp_prompt(srp, file_path))
    if ocp:
        sections.append(build_ocp_prompt(ocp, file_path))
    if dip:
        sections.append(build_dip_prompt(dip, file_path))
    if isp:
        sections.append(build_isp_prompt(isp, file_path))
    return "\n".join(sections)
