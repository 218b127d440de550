"""
Unit tests for the ISP interface-shape analyzer.
"""

import pytest

from solid_lens.core.interfaces import InterfaceAnalyzer
from solid_lens.core.models import ImplementationRecord, InterfaceRecord, StubMethod


def _stub(name, line):
    return StubMethod(name=name, line=line, code=f"def {name}(...): pass")


class TestInterfaceAnalyzer:
    """Test cases for InterfaceAnalyzer."""

    def test_fat_interface_and_forced_implementation(self, extractor, python_fat_interface):
        """Test a six-method ABC, its stub bodies and a half-stubbed subclass are all reported."""
        results = InterfaceAnalyzer().analyze_model(extractor.extract(python_fat_interface, "python"))

        assert [(r.class_name, r.is_interface) for r in results] == [
            ("Worker", True), ("Worker", False), ("Robot", False),
        ]

        fat, worker_stubs, robot = results
        assert fat.abstract_method_count == 6
        assert fat.ifs == 6
        assert fat.isp_score == 6.0
        assert fat.violations[0].kind == "fat_interface"
        assert fat.violations[0].code == "Interface has 6 abstract methods"
        assert fat.suggestion == "Consider splitting into 2 smaller interfaces with ~3 methods each."

        assert worker_stubs.empty_implementations == 6
        assert worker_stubs.sir == pytest.approx(1.0)
        assert worker_stubs.isp_score == pytest.approx(9.0)

        assert robot.empty_implementations == 1
        assert robot.not_implemented_errors == 1
        assert robot.sir == pytest.approx(0.5)
        assert robot.isp_score == pytest.approx(3.0)
        assert [(v.kind, v.method_name) for v in robot.violations] == [
            ("empty_implementation", "eat"),
            ("not_implemented_error", "sleep"),
        ]
        assert robot.suggestion == (
            "1 empty method(s) indicate unused interface requirements. "
            "1 NotImplementedError method(s) indicate forced interface compliance. "
            "Consider using smaller, more focused interfaces."
        )

    def test_interface_at_threshold_is_not_fat(self):
        """Test exactly the threshold number of methods is fine."""
        interface = InterfaceRecord(name="Small", start_line=0, abstract_method_count=5)

        assert InterfaceAnalyzer().analyze_interface(interface) is None

    def test_stub_count_escape(self):
        """Test two stubs are flagged even when the ratio is below the threshold."""
        implementation = ImplementationRecord(
            name="Wide", start_line=3, total_methods=10,
            empty_methods=[_stub("a", 4), _stub("b", 6)],
        )

        result = InterfaceAnalyzer().analyze_implementation(implementation)

        assert result is not None
        assert result.sir == pytest.approx(0.2)
        assert result.isp_score == pytest.approx(3.0)

    def test_single_stub_below_ratio(self):
        """Test one stub out of many methods is not reported."""
        implementation = ImplementationRecord(
            name="Mostly", start_line=0, total_methods=5, empty_methods=[_stub("a", 1)],
        )

        assert InterfaceAnalyzer().analyze_implementation(implementation) is None

    def test_single_stub_at_ratio(self):
        """Test the ratio threshold is inclusive."""
        implementation = ImplementationRecord(
            name="Half", start_line=0, total_methods=2, empty_methods=[_stub("a", 1)],
        )

        result = InterfaceAnalyzer(sir_threshold=0.5).analyze_implementation(implementation)

        assert result is not None
        assert result.suggestion == (
            "1 empty method(s) indicate unused interface requirements. "
            "Consider using smaller, more focused interfaces."
        )

    def test_high_stub_ratio_note(self):
        """Test the broad-interface note above a 50% stub ratio."""
        implementation = ImplementationRecord(
            name="Hollow", start_line=0, total_methods=2,
            empty_methods=[_stub("a", 1)],
            not_implemented_methods=[StubMethod(name="b", line=2, code="def b(...): raise NotImplementedError")],
        )

        result = InterfaceAnalyzer().analyze_implementation(implementation)

        assert "High stub ratio suggests the interface is too broad for this class" in result.suggestion

    def test_no_stubs(self):
        """Test a class without stubs is never reported."""
        implementation = ImplementationRecord(name="Solid", start_line=0, total_methods=0)

        assert InterfaceAnalyzer().analyze_implementation(implementation) is None

    def test_abstract_class_is_also_an_implementation(self, extractor):
        """Test an abstract class with stub bodies is reported like any other class."""
        source = (
            "from abc import ABC, abstractmethod\n"
            "class Port(ABC):\n"
            "    @abstractmethod\n"
            "    def send(self):\n"
            "        pass\n"
            "    @abstractmethod\n"
            "    def receive(self):\n"
            "        pass\n"
        )

        results = InterfaceAnalyzer().analyze_model(extractor.extract(source, "python"))

        assert [r.class_name for r in results] == ["Port"]
        assert results[0].is_interface is False
        assert results[0].empty_implementations == 2

    def test_typescript_printer(self, extractor):
        """Test a fat TypeScript interface and its stubbed implementation."""
        source = (
            "interface Printer {\n"
            "  print(doc: Doc): void;\n"
            "  scan(doc: Doc): void;\n"
            "  fax(doc: Doc): void;\n"
            "  staple(doc: Doc): void;\n"
            "  copy(doc: Doc): void;\n"
            "  bind(doc: Doc): void;\n"
            "}\n"
            "\n"
            "class BasicPrinter implements Printer {\n"
            "  print(doc: Doc): void {\n"
            "    console.log(doc);\n"
            "  }\n"
            "  scan(doc: Doc): void {}\n"
            "  fax(doc: Doc): void {\n"
            "    throw new Error(\"Not implemented\");\n"
            "  }\n"
            "}\n"
        )
        results = InterfaceAnalyzer().analyze_model(extractor.extract(source, "typescript"))

        assert [(r.class_name, r.is_interface) for r in results] == [("Printer", True), ("BasicPrinter", False)]
        assert results[0].abstract_method_count == 6
        assert results[1].sir == pytest.approx(2 / 3)
        assert [v.code for v in results[1].violations] == ["scan() { }", "fax() { throw new Error(...) }"]
