"""
Unit tests for the OCP type-discrimination analyzer.
"""

import textwrap

import pytest

from solid_lens.core.models import OCPViolation
from solid_lens.core.type_checks import TypeCheckAnalyzer, ocp_score, type_check_density, type_field_switch_count

TS_DISPATCH = textwrap.dedent("""\
    class Handler {
      handle(event: AppEvent) {
        switch (event.type) {
          case "click":
            return this.onClick();
          case "key":
            return this.onKey();
        }
        if (typeof event.payload === "string") {
          return null;
        }
        if (typeof event.payload === "object") {
          return event.payload;
        }
        if (event instanceof MouseEvent) {
          return 1;
        }
      }
    }
    """)


class TestTypeCheckAnalyzer:
    """Test cases for TypeCheckAnalyzer."""

    def test_python_weights_are_additive(self, extractor, python_type_switch):
        """Test two isinstance checks and one type-field comparison score 5.5."""
        analyzer = TypeCheckAnalyzer()
        results = analyzer.analyze_model(extractor.extract(python_type_switch, "python"))

        assert len(results) == 1
        result = results[0]
        assert result.class_name == "AreaCalculator"
        assert result.method_name == "area"
        assert result.ocp_score == pytest.approx(5.5)
        assert result.tfsc == 1
        assert result.tcd == pytest.approx(2 / 8)
        assert [(v.line, v.kind) for v in result.violations] == [
            (2, "instanceof"), (4, "instanceof"), (6, "type_field"),
        ]
        assert result.violations[0].code == "isinstance(shape, Circle)"
        assert result.suggestion == (
            "Consider using polymorphism (Strategy/Visitor pattern) instead of instanceof checks."
        )
        assert analyzer.violations(results) == [result]

    def test_methods_without_checks_are_omitted(self, extractor, python_split_class):
        """Test methods with no type checks produce no result."""
        results = TypeCheckAnalyzer().analyze_model(extractor.extract(python_split_class, "python"))

        assert results == []

    def test_below_threshold(self, extractor):
        """Test a single isinstance check is reported but not a violation."""
        source = textwrap.dedent("""\
            class Parser:
                def parse(self, value):
                    if isinstance(value, str):
                        return value
                    return str(value)
            """)
        analyzer = TypeCheckAnalyzer()
        results = analyzer.analyze_model(extractor.extract(source, "python"))

        assert results[0].ocp_score == pytest.approx(2.0)
        assert results[0].suggestion == "Minor type-checking detected. Consider if polymorphism would be beneficial."
        assert analyzer.violations(results) == []

    def test_python_type_equality_and_tuple(self, extractor):
        """Test type() comparisons and isinstance with a tuple of types."""
        source = textwrap.dedent("""\
            class Exporter:
                def export(self, item):
                    if type(item) == dict:
                        return 1
                    if type(item) is not list:
                        return 2
                    if isinstance(item, (set, frozenset)):
                        return 3
            """)
        result = TypeCheckAnalyzer().analyze_model(extractor.extract(source, "python"))[0]

        assert [v.kind for v in result.violations] == ["type_equality", "type_equality", "instanceof"]
        assert result.ocp_score == pytest.approx(6.0)

    def test_brace_dispatch(self, extractor):
        """Test case labels under a type switch, typeof and instanceof in TypeScript."""
        result = TypeCheckAnalyzer().analyze_model(extractor.extract(TS_DISPATCH, "typescript"))[0]

        kinds = [v.kind for v in result.violations]
        assert kinds == ["type_field", "type_field", "typeof", "instanceof"]
        assert result.tfsc == 2
        assert result.ocp_score == pytest.approx(1.5 + 1.5 + 1.0 + 2.0)
        assert result.violations[0].code == 'case "click":'
        assert result.suggestion == (
            "Consider using polymorphism or discriminated unions instead of type-field switches."
        )

    def test_primitive_typeof_is_ignored(self, extractor):
        """Test typeof against primitive tags is not a type check."""
        source = textwrap.dedent("""\
            class Guard {
              check(value) {
                if (typeof value === "string") { return 1; }
                if (typeof value !== "undefined") { return 2; }
              }
            }
            """)
        results = TypeCheckAnalyzer().analyze_model(extractor.extract(source, "javascript"))

        assert results == []

    def test_case_without_type_switch(self, extractor):
        """Test case labels of an unrelated switch are not counted."""
        source = textwrap.dedent("""\
            class Menu {
              select(index) {
                switch (index) {
                  case 1:
                    return this.open();
                  case 2:
                    return this.close();
                }
              }
            }
            """)
        results = TypeCheckAnalyzer().analyze_model(extractor.extract(source, "typescript"))

        assert results == []


def test_score_helpers():
    violations = [
        OCPViolation(line=0, kind="instanceof", code="a"),
        OCPViolation(line=1, kind="typeof", code="b"),
        OCPViolation(line=2, kind="type_field", code="c"),
        OCPViolation(line=3, kind="type_field", code="d"),
    ]

    assert ocp_score(violations) == pytest.approx(2.0 + 1.0 + 1.5 + 1.5)
    assert type_field_switch_count(violations) == 2
    assert type_check_density(violations, 4) == pytest.approx(0.5)
    assert type_check_density(violations, 0) == 0.0
