"""
Data models for structural facts and principle analysis results.

Structural records (classes, methods, interfaces, implementations) are
recovered from raw source text by the scanners; result records are produced
by the four principle analyzers. All line numbers are 0-based and inclusive.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set


# --- Structural records ---

@dataclass
class MethodRecord:
    name: str
    start_line: int
    end_line: int
    header_end_line: int = -1  # last line of a multi-line signature
    used_variables: Set[str] = field(default_factory=set)
    called_methods: Set[str] = field(default_factory=set)

    def __post_init__(self):
        if self.header_end_line < 0:
            self.header_end_line = self.start_line

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "used_variables": sorted(self.used_variables),
            "called_methods": sorted(self.called_methods),
        }


@dataclass
class ConstructorRecord:
    start_line: int
    end_line: int
    params: List[str] = field(default_factory=list)


@dataclass
class ClassRecord:
    name: str
    start_line: int
    end_line: int
    methods: List[MethodRecord] = field(default_factory=list)
    instance_variables: Set[str] = field(default_factory=set)
    constructor: Optional[ConstructorRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "methods": [m.to_dict() for m in self.methods],
            "instance_variables": sorted(self.instance_variables),
            "constructor": {
                "start_line": self.constructor.start_line,
                "end_line": self.constructor.end_line,
                "params": list(self.constructor.params),
            } if self.constructor else None,
        }


@dataclass
class InterfaceRecord:
    name: str
    start_line: int
    abstract_method_count: int = 0
    methods: List[str] = field(default_factory=list)


@dataclass
class StubMethod:
    name: str
    line: int
    code: str


@dataclass
class ImplementationRecord:
    name: str
    start_line: int
    total_methods: int = 0
    empty_methods: List[StubMethod] = field(default_factory=list)
    not_implemented_methods: List[StubMethod] = field(default_factory=list)

    @property
    def stub_count(self) -> int:
        return len(self.empty_methods) + len(self.not_implemented_methods)


@dataclass
class SourceModel:
    """Everything the scanners recovered from one file."""
    language_id: str
    classes: List[ClassRecord] = field(default_factory=list)
    interfaces: List[InterfaceRecord] = field(default_factory=list)
    implementations: List[ImplementationRecord] = field(default_factory=list)
    lines: List[str] = field(default_factory=list, repr=False)
    profile: Any = field(default=None, repr=False, compare=False)  # SyntaxProfile

    @property
    def is_empty(self) -> bool:
        return not (self.classes or self.interfaces or self.implementations)


# --- SRP ---

@dataclass
class LCOM4Result:
    class_name: str
    start_line: int
    lcom4_value: int
    connected_components: List[List[str]] = field(default_factory=list)
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "start_line": self.start_line,
            "lcom4_value": self.lcom4_value,
            "connected_components": [list(c) for c in self.connected_components],
            "suggestion": self.suggestion,
        }


# --- OCP ---

@dataclass
class OCPViolation:
    line: int
    kind: str  # instanceof | type_equality | typeof | type_field
    code: str


@dataclass
class OCPResult:
    class_name: str
    method_name: str
    start_line: int
    tcd: float
    tfsc: int
    ocp_score: float
    violations: List[OCPViolation] = field(default_factory=list)
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "method_name": self.method_name,
            "start_line": self.start_line,
            "tcd": self.tcd,
            "tfsc": self.tfsc,
            "ocp_score": self.ocp_score,
            "violations": [{"line": v.line, "kind": v.kind, "code": v.code} for v in self.violations],
            "suggestion": self.suggestion,
        }


# --- DIP ---

@dataclass
class DIPViolation:
    line: int
    kind: str  # constructor_instantiation | method_instantiation
    code: str
    class_name: str


@dataclass
class DIPResult:
    class_name: str
    start_line: int
    constructor_instantiations: int
    method_instantiations: int
    injected_dependencies: int
    total_dependencies: int
    dii: float
    dip_score: float
    violations: List[DIPViolation] = field(default_factory=list)
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "start_line": self.start_line,
            "constructor_instantiations": self.constructor_instantiations,
            "method_instantiations": self.method_instantiations,
            "injected_dependencies": self.injected_dependencies,
            "total_dependencies": self.total_dependencies,
            "dii": self.dii,
            "dip_score": self.dip_score,
            "violations": [
                {"line": v.line, "kind": v.kind, "code": v.code, "class_name": v.class_name}
                for v in self.violations
            ],
            "suggestion": self.suggestion,
        }


# --- ISP ---

@dataclass
class ISPViolation:
    line: int
    kind: str  # fat_interface | empty_implementation | not_implemented_error
    method_name: str
    code: str


@dataclass
class ISPResult:
    class_name: str
    start_line: int
    is_interface: bool
    abstract_method_count: int = 0
    empty_implementations: int = 0
    not_implemented_errors: int = 0
    ifs: int = 0
    sir: float = 0.0
    isp_score: float = 0.0
    violations: List[ISPViolation] = field(default_factory=list)
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "start_line": self.start_line,
            "is_interface": self.is_interface,
            "abstract_method_count": self.abstract_method_count,
            "empty_implementations": self.empty_implementations,
            "not_implemented_errors": self.not_implemented_errors,
            "ifs": self.ifs,
            "sir": self.sir,
            "isp_score": self.isp_score,
            "violations": [
                {"line": v.line, "kind": v.kind, "method_name": v.method_name, "code": v.code}
                for v in self.violations
            ],
            "suggestion": self.suggestion,
        }
