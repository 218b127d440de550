"""
Per-syntax capability profiles.

A SyntaxProfile bundles everything that differs between the supported
surface syntaxes: declaration patterns, the instance qualifier, type-check
and instantiation patterns, stub-body classification, and which scanner walks
the file. A profile is selected once per file from the language identifier;
analyzers only ever talk to the profile.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, List, Optional, Pattern, Sequence, Tuple, Union

from .models import MethodRecord, OCPViolation
from .scanners import BraceScanner, IndentationScanner, ScannerBase

STUB_EMPTY = "empty"
STUB_NOT_IMPLEMENTED = "not_implemented"

EXTENSION_LANGUAGES: Dict[str, str] = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
}

PYTHON_EXCLUDED_TYPES = frozenset({
    "Exception", "Error", "ValueError", "TypeError", "RuntimeError", "KeyError",
    "AttributeError", "IndexError", "StopIteration", "NotImplementedError",
    "Dict", "List", "Set", "Tuple", "Optional", "Union", "Any", "Callable",
    "Type", "Literal",
})

BRACE_EXCLUDED_TYPES = frozenset({
    "Error", "TypeError", "RangeError", "SyntaxError", "Array", "Object", "Map",
    "Set", "WeakMap", "WeakSet", "Promise", "Date", "RegExp", "URL",
    "URLSearchParams", "FormData", "Headers", "Request", "Response", "Event",
    "CustomEvent", "EventEmitter",
})

PRIMITIVE_TYPE_TAGS = frozenset({"string", "number", "boolean", "undefined"})

_CASE_LABEL = re.compile(r'^\s*case\s+["\']?\w+["\']?\s*:')


class SyntaxProfile:
    """Base profile; subclasses fill in the patterns for one syntax family."""

    name: str = ""
    qualifier: str = ""
    constructor_name: str = ""
    supports_interfaces: bool = False

    class_pattern: Pattern
    method_pattern: Pattern
    self_reference_pattern: Pattern
    type_check_patterns: Sequence[Tuple[str, Pattern]] = ()
    ignored_type_tags: FrozenSet[str] = frozenset()
    case_label_pattern: Pattern = _CASE_LABEL
    dispatch_pattern: Optional[Pattern] = None
    instantiation_pattern: Pattern
    excluded_types: FrozenSet[str] = frozenset()

    def __init__(self, language_id: str):
        self.language_id = language_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.language_id!r})"

    def create_scanner(self) -> ScannerBase:
        raise NotImplementedError

    # --- Self references ---

    def iter_self_references(self, line: str) -> Iterator[Tuple[str, bool]]:
        """Yield (name, is_call) for each instance-qualified reference on a line."""
        for match in self.self_reference_pattern.finditer(line):
            name = match.group(1)
            if self.is_ignored_reference(name):
                continue
            yield name, match.group(2) is not None

    def is_ignored_reference(self, name: str) -> bool:
        return False

    # --- Type discrimination ---

    def find_type_checks(self, method_lines: List[str], start_line: int) -> List[OCPViolation]:
        violations: List[OCPViolation] = []
        for offset, line in enumerate(method_lines):
            line_number = start_line + offset
            for kind, pattern in self.type_check_patterns:
                for match in pattern.finditer(line):
                    tag = match.groupdict().get("tag")
                    if tag is not None and tag in self.ignored_type_tags:
                        continue
                    violations.append(OCPViolation(line=line_number, kind=kind, code=match.group(0)))
            if self.case_label_pattern.match(line) and self._case_is_dispatch(method_lines, offset):
                violations.append(OCPViolation(line=line_number, kind="type_field", code=line.strip()))
        return violations

    def _case_is_dispatch(self, method_lines: List[str], offset: int) -> bool:
        if self.dispatch_pattern is None:
            return True
        preceding = "\n".join(method_lines[:offset])
        return self.dispatch_pattern.search(preceding) is not None

    # --- Instantiation ---

    def find_instantiations(self, line: str) -> List[str]:
        found = []
        for match in self.instantiation_pattern.finditer(line):
            type_name = match.group(1)
            if type_name in self.excluded_types or self._is_declaration(line, type_name):
                continue
            found.append(type_name)
        return found

    def _is_declaration(self, line: str, type_name: str) -> bool:
        return False

    # --- Stub classification ---

    def skips_stub_check(self, method_name: str) -> bool:
        return (
            method_name.startswith("__")
            and method_name.endswith("__")
            and method_name != "__init__"
        )

    def method_body(self, lines: List[str], method: MethodRecord) -> str:
        raise NotImplementedError

    def classify_stub(self, method_name: str, body: str) -> Optional[str]:
        raise NotImplementedError

    def stub_code(self, method_name: str, stub_kind: str) -> str:
        raise NotImplementedError


class IndentationProfile(SyntaxProfile):
    """Indentation-delimited syntax (Python)."""

    name = "indentation"
    qualifier = "self"
    constructor_name = "__init__"
    supports_interfaces = True

    class_pattern = re.compile(r'^class\s+(\w+)')
    interface_class_pattern = re.compile(r'^class\s+(\w+)\s*\(([^)]*)\)')
    interface_base_pattern = re.compile(r'ABC|Protocol')
    abstract_marker = "@abstractmethod"
    method_pattern = re.compile(r'^(?:async\s+)?def\s+(\w+)\s*\(')
    self_reference_pattern = re.compile(r'\bself\.(\w+)( ?\()?')
    type_check_patterns = (
        ("instanceof", re.compile(r'isinstance\s*\(\s*[\w.]+\s*,\s*(?:\([^)]*\)|[\w.]+)\s*\)')),
        ("type_equality", re.compile(r'type\s*\(\s*[\w.]+\s*\)\s*(?:[=!]=|is\s+not\s|is\s)\s*[\w.]+')),
        ("type_field", re.compile(r'\.\s*(?:type|kind|_type|__type__|category|variant)\s*[=!]=\s*["\']?\w+["\']?')),
    )
    instantiation_pattern = re.compile(r'\b([A-Z][a-zA-Z0-9_]*)\s*\(')
    excluded_types = PYTHON_EXCLUDED_TYPES

    _inline_body = re.compile(r'\)\s*(?:->\s*[^:]+)?:\s*([^#\s].*)$')

    def create_scanner(self) -> ScannerBase:
        return IndentationScanner(self)

    def is_ignored_reference(self, name: str) -> bool:
        return name.startswith("_") and name.endswith("_")

    def _is_declaration(self, line: str, type_name: str) -> bool:
        return f"def {type_name}" in line or f"class {type_name}" in line

    def method_body(self, lines: List[str], method: MethodRecord) -> str:
        body = []
        # def stop(self): pass
        inline = self._inline_body.search(lines[method.header_end_line])
        if inline:
            body.append(inline.group(1).strip())
        for line in lines[method.header_end_line + 1:method.end_line + 1]:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                body.append(stripped)
        return "\n".join(body)

    def classify_stub(self, method_name: str, body: str) -> Optional[str]:
        if body in ("pass", "..."):
            return STUB_EMPTY
        if "raise NotImplementedError" in body or "raise NotImplemented" in body:
            return STUB_NOT_IMPLEMENTED
        return None

    def stub_code(self, method_name: str, stub_kind: str) -> str:
        if stub_kind == STUB_EMPTY:
            return f"def {method_name}(...): pass"
        return f"def {method_name}(...): raise NotImplementedError"


class BraceProfile(SyntaxProfile):
    """Brace-delimited syntax (TypeScript / JavaScript)."""

    name = "brace"
    qualifier = "this"
    constructor_name = "constructor"

    class_pattern = re.compile(r'^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)')
    interface_pattern = re.compile(r'^(?:export\s+)?(?:default\s+)?interface\s+(\w+)')
    abstract_class_pattern = re.compile(r'^(?:export\s+)?(?:default\s+)?abstract\s+class\s+(\w+)')
    constructor_pattern = re.compile(r'^(?:(?:public|private|protected)\s+)?constructor\s*\(')
    method_pattern = re.compile(
        r'^(?:(?:public|private|protected|static|async|override|readonly|get|set)\s+)*'
        r'\*?\s*(\w+)\s*(?:<[^>]*>)?\s*\('
    )
    signature_pattern = re.compile(
        r'^(?:(?:public|private|protected|static|abstract|readonly|async)\s+)*'
        r'(\w+)\??\s*(?:<[^>]*>)?\s*\('
    )
    reserved_names = frozenset({
        "if", "for", "while", "switch", "catch", "return", "function", "with",
        "super", "constructor", "new", "typeof", "await", "yield",
    })
    self_reference_pattern = re.compile(r'\bthis\.(\w+)( ?\()?')
    type_check_patterns = (
        ("instanceof", re.compile(r'\w+\s+instanceof\s+\w+')),
        ("typeof", re.compile(r'typeof\s+[\w.]+\s*[=!]==?\s*["\'](?P<tag>\w+)["\']')),
        ("type_field", re.compile(
            r'\.\s*(?:type|kind|_type|__type|category|variant|discriminator)\s*[=!]==?\s*["\']?\w+["\']?'
        )),
    )
    ignored_type_tags = PRIMITIVE_TYPE_TAGS
    dispatch_pattern = re.compile(
        r'switch\s*\(\s*\w+\.(?:type|kind|_type|category|variant|discriminator)\s*\)',
        re.IGNORECASE,
    )
    instantiation_pattern = re.compile(r'new\s+([A-Z][a-zA-Z0-9_]*)\s*(?:<[^>]*>)?\s*\(')
    excluded_types = BRACE_EXCLUDED_TYPES

    _not_implemented_throw = re.compile(r'throw\s+new\s+\w*Error\s*\(')
    _not_implemented_message = re.compile(r'not\s*implemented', re.IGNORECASE)

    def __init__(self, language_id: str, supports_interfaces: bool):
        super().__init__(language_id)
        self.supports_interfaces = supports_interfaces

    def create_scanner(self) -> ScannerBase:
        return BraceScanner(self)

    def method_body(self, lines: List[str], method: MethodRecord) -> str:
        kept = []
        for line in lines[method.start_line:method.end_line + 1]:
            stripped = line.strip()
            if stripped.startswith("//"):
                continue
            kept.append(stripped)
        text = " ".join(kept)
        open_idx = text.find("{")
        if open_idx < 0:
            return ""
        close_idx = text.rfind("}")
        inner = text[open_idx + 1:close_idx] if close_idx > open_idx else text[open_idx + 1:]
        inner = inner.replace("{", " ").replace("}", " ")
        return " ".join(inner.split())

    def classify_stub(self, method_name: str, body: str) -> Optional[str]:
        if body == "" or re.fullmatch(rf'{re.escape(method_name)}\s*\([^)]*\)\s*;?', body):
            return STUB_EMPTY
        if self._not_implemented_throw.search(body) and self._not_implemented_message.search(body):
            return STUB_NOT_IMPLEMENTED
        return None

    def stub_code(self, method_name: str, stub_kind: str) -> str:
        if stub_kind == STUB_EMPTY:
            return f"{method_name}() {{ }}"
        return f"{method_name}() {{ throw new Error(...) }}"


PYTHON_PROFILE = IndentationProfile("python")
TYPESCRIPT_PROFILE = BraceProfile("typescript", supports_interfaces=True)
TYPESCRIPT_REACT_PROFILE = BraceProfile("typescriptreact", supports_interfaces=True)
JAVASCRIPT_PROFILE = BraceProfile("javascript", supports_interfaces=False)
JAVASCRIPT_REACT_PROFILE = BraceProfile("javascriptreact", supports_interfaces=False)

LANGUAGE_PROFILES: Dict[str, SyntaxProfile] = {
    profile.language_id: profile
    for profile in (
        PYTHON_PROFILE,
        TYPESCRIPT_PROFILE,
        TYPESCRIPT_REACT_PROFILE,
        JAVASCRIPT_PROFILE,
        JAVASCRIPT_REACT_PROFILE,
    )
}

SUPPORTED_LANGUAGES = tuple(LANGUAGE_PROFILES)


def get_profile(language_id: Optional[str]) -> Optional[SyntaxProfile]:
    """Return the profile for a language identifier, or None when unsupported."""
    if not language_id:
        return None
    return LANGUAGE_PROFILES.get(language_id.lower())


def language_for_path(file_path: Union[str, Path]) -> Optional[str]:
    """Detect a language identifier from a file extension."""
    return EXTENSION_LANGUAGES.get(Path(file_path).suffix.lower())


def extensions_for_languages(languages: Sequence[str]) -> List[str]:
    enabled = {language.lower() for language in languages}
    return [ext for ext, language in EXTENSION_LANGUAGES.items() if language in enabled]

