"""
Golden-format tests for the Markdown remediation documents.
"""

from solid_lens.core.models import (
    DIPResult,
    DIPViolation,
    ISPResult,
    ISPViolation,
    LCOM4Result,
    OCPResult,
    OCPViolation,
)
from solid_lens.core.prompts import (
    build_combined_report,
    build_dip_prompt,
    build_isp_prompt,
    build_ocp_prompt,
    build_srp_prompt,
)


def _lcom4_result():
    return LCOM4Result(
        class_name="UserManager",
        start_line=0,
        lcom4_value=2,
        connected_components=[["__init__", "get_user", "save_user"], ["send_email", "format_email", "notify"]],
        suggestion="Consider splitting into 2 classes.",
    )


def test_srp_prompt_golden():
    prompt = build_srp_prompt([_lcom4_result()], "/work/src/user_manager.py")

    assert prompt == (
        "# Single Responsibility Principle Violation Analysis\n\n"
        "**File:** user_manager.py\n\n"
        "The following class(es) may violate the Single Responsibility Principle based on LCOM4 analysis:\n\n"
        "## Class: UserManager\n"
        "- **LCOM4 Score:** 2 (ideal is 1)\n"
        "- **Connected Components:** 2\n\n"
        "### Method Groups (disconnected responsibilities):\n"
        "1. **Responsibility 1:** __init__, get_user, save_user\n"
        "2. **Responsibility 2:** send_email, format_email, notify\n"
        "\n### Recommended Refactoring:\n"
        "This class has 2 disconnected groups of methods that don't share state or call each other. "
        "Consider extracting each group into its own class:\n\n"
        "- Create `UserManagerCore` with methods: __init__, get_user, save_user\n"
        "- Create `UserManagerHelper` with methods: send_email, format_email, notify\n"
        "\n"
        "---\n"
        "**Action Required:** Please refactor the above class(es) to follow the Single Responsibility Principle. "
        "Each new class should have one clear responsibility and all its methods should be cohesive "
        "(working on the same data/state).\n"
    )


def test_srp_prompt_three_groups_uses_suffix_table():
    result = LCOM4Result(class_name="God", start_line=0, lcom4_value=3,
                         connected_components=[["a"], ["b"], ["c"]])

    prompt = build_srp_prompt([result], "god.py")

    assert "- Create `GodCore` with methods: a\n" in prompt
    assert "- Create `GodManager` with methods: b\n" in prompt
    assert "- Create `GodHandler` with methods: c\n" in prompt


def test_ocp_prompt_golden():
    result = OCPResult(
        class_name="AreaCalculator",
        method_name="area",
        start_line=1,
        tcd=0.25,
        tfsc=1,
        ocp_score=5.5,
        violations=[
            OCPViolation(line=2, kind="instanceof", code="isinstance(shape, Circle)"),
            OCPViolation(line=6, kind="type_field", code='.kind == "triangle"'),
            OCPViolation(line=4, kind="instanceof", code="isinstance(shape, Square)"),
        ],
        suggestion="Consider using polymorphism (Strategy/Visitor pattern) instead of instanceof checks.",
    )

    prompt = build_ocp_prompt([result], "shapes.py")

    assert prompt == (
        "# Open/Closed Principle Violation Analysis\n\n"
        "**File:** shapes.py\n\n"
        "The following method(s) may violate the Open/Closed Principle:\n\n"
        "## Class: AreaCalculator, Method: area\n"
        "- **OCP Score:** 5.5 (threshold exceeded)\n"
        "- **Type-Check Density (TCD):** 25.0%\n"
        "- **Type-Field Switch Count (TFSC):** 1\n\n"
        "### Detected Violations:\n"
        "- **isinstance/instanceof checks:** 2\n"
        "  - Line 3: `isinstance(shape, Circle)`\n"
        "  - Line 5: `isinstance(shape, Square)`\n"
        "- **type-field conditionals:** 1\n"
        "  - Line 7: `.kind == \"triangle\"`\n"
        "\n### Recommended Refactoring:\n"
        "Consider using polymorphism (Strategy/Visitor pattern) instead of instanceof checks.\n\n"
        "**Patterns to consider:**\n"
        "1. **Strategy Pattern:** Extract each type-specific behavior into separate strategy classes\n"
        "2. **Polymorphism:** Move behavior into subclasses and use method overriding\n"
        "3. **Visitor Pattern:** If operations vary independently from object structure\n"
        "4. **Factory + Registry:** Register handlers for each type dynamically\n\n"
        "---\n"
        "**Action Required:** Refactor to eliminate type-checking conditionals. "
        "New types should be addable without modifying existing code.\n"
    )


def test_ocp_prompt_truncates_each_kind():
    violations = [OCPViolation(line=i, kind="typeof", code=f"typeof x === 'T{i}'") for i in range(5)]
    result = OCPResult(class_name="C", method_name="m", start_line=0, tcd=0.5, tfsc=0,
                       ocp_score=5.0, violations=violations, suggestion="s")

    prompt = build_ocp_prompt([result], "c.ts")

    assert "- **typeof checks:** 5\n" in prompt
    assert "  - Line 3: `typeof x === 'T2'`\n" in prompt
    assert "T3" not in prompt
    assert "  - ... and 2 more\n" in prompt


def test_dip_prompt_golden():
    result = DIPResult(
        class_name="ReportService",
        start_line=0,
        constructor_instantiations=2,
        method_instantiations=1,
        injected_dependencies=0,
        total_dependencies=3,
        dii=0.0,
        dip_score=5.5,
        violations=[
            DIPViolation(line=2, kind="constructor_instantiation", code="self.db = Database()", class_name="Database"),
            DIPViolation(line=3, kind="constructor_instantiation", code="self.mailer = Mailer()", class_name="Mailer"),
            DIPViolation(line=6, kind="method_instantiation", code="formatter = Formatter()", class_name="Formatter"),
        ],
        suggestion="Inject dependencies.",
    )

    prompt = build_dip_prompt([result], "report.py")

    assert prompt == (
        "# Dependency Inversion Principle Violation Analysis\n\n"
        "**File:** report.py\n\n"
        "The following class(es) may violate the Dependency Inversion Principle:\n\n"
        "## Class: ReportService\n"
        "- **DIP Score:** 5.5 (threshold exceeded)\n"
        "- **Dependency Injection Index (DII):** 0% (100% = all injected)\n"
        "- **Constructor Instantiations:** 2\n"
        "- **Method Instantiations:** 1\n"
        "- **Injected Dependencies:** 0\n\n"
        "### Direct Instantiations Found:\n"
        "\n**In Constructor:**\n"
        "- Line 3: `Database` - `self.db = Database()`\n"
        "- Line 4: `Mailer` - `self.mailer = Mailer()`\n"
        "\n**In Methods:**\n"
        "- Line 7: `Formatter` - `formatter = Formatter()`\n"
        "\n### Recommended Refactoring:\n"
        "Inject dependencies.\n\n"
        "**Steps to fix:**\n"
        "1. Create abstractions (interfaces/protocols) for each concrete dependency\n"
        "2. Add constructor parameters to receive dependencies\n"
        "3. Have concrete classes implement the abstractions\n"
        "4. Inject dependencies from calling code or use a DI container\n\n"
        "---\n"
        "**Action Required:** Refactor to inject dependencies instead of creating them internally. "
        "High-level modules should depend on abstractions, not concrete implementations.\n"
    )


def test_dip_prompt_truncates_sites():
    violations = [
        DIPViolation(line=i, kind="method_instantiation", code=f"T{i}()", class_name=f"T{i}") for i in range(7)
    ]
    result = DIPResult(class_name="C", start_line=0, constructor_instantiations=0, method_instantiations=7,
                       injected_dependencies=1, total_dependencies=8, dii=0.125, dip_score=10.5,
                       violations=violations, suggestion="s")

    prompt = build_dip_prompt([result], "c.py")

    assert "**In Constructor:**" not in prompt
    assert "- **Dependency Injection Index (DII):** 12% (100% = all injected)\n" in prompt
    assert "- Line 5: `T4` - `T4()`\n" in prompt
    assert "T5" not in prompt
    assert "- ... and 2 more\n" in prompt


def test_isp_prompt_golden():
    interface = ISPResult(
        class_name="Worker", start_line=3, is_interface=True, abstract_method_count=6, ifs=6, isp_score=6.0,
        violations=[ISPViolation(line=3, kind="fat_interface", method_name="", code="Interface has 6 abstract methods")],
        suggestion="Consider splitting into 2 smaller interfaces with ~3 methods each.",
    )
    implementation = ISPResult(
        class_name="Robot", start_line=23, is_interface=False, empty_implementations=1,
        not_implemented_errors=1, sir=0.5, isp_score=3.0,
        violations=[
            ISPViolation(line=27, kind="empty_implementation", method_name="eat", code="def eat(...): pass"),
            ISPViolation(line=30, kind="not_implemented_error", method_name="sleep",
                         code="def sleep(...): raise NotImplementedError"),
        ],
        suggestion="Consider using smaller, more focused interfaces.",
    )

    prompt = build_isp_prompt([interface, implementation], "workers.py")

    assert prompt == (
        "# Interface Segregation Principle Violation Analysis\n\n"
        "**File:** workers.py\n\n"
        "The following class(es)/interface(s) may violate the Interface Segregation Principle:\n\n"
        "## Interface: Worker (Fat Interface)\n"
        "- **Abstract Method Count (IFS):** 6\n"
        "- **Recommended:** Split into smaller interfaces with 3-5 methods each\n\n"
        "### Detected Issues:\n"
        "- **Fat Interface:** Interface has 6 abstract methods\n"
        "\n### Recommended Refactoring:\n"
        "Consider splitting into 2 smaller interfaces with ~3 methods each.\n\n"
        "## Class: Robot (Forced Implementation)\n"
        "- **Stub Implementation Ratio (SIR):** 50%\n"
        "- **Empty Implementations:** 1\n"
        "- **NotImplementedError Methods:** 1\n\n"
        "### Detected Issues:\n"
        "- **Empty Method:** `eat` at line 28\n"
        "- **NotImplementedError:** `sleep` at line 31\n"
        "\n### Recommended Refactoring:\n"
        "Consider using smaller, more focused interfaces.\n\n"
        "---\n"
        "**Action Required:** Split large interfaces into smaller, role-specific interfaces. "
        "Classes should only implement interfaces whose methods they actually use.\n"
    )


def test_combined_report_skips_empty_sections():
    report = build_combined_report("user_manager.py", srp=[_lcom4_result()])

    assert report.startswith("# Single Responsibility Principle Violation Analysis")
    assert "Open/Closed" not in report
    assert build_combined_report("empty.py") == ""
