"""
Line-oriented structural scanners.

Each scanner is an explicit finite-state walk over the lines of one file
(state = outside / in class / in method, plus the baseline indentation or
brace depth of whatever is open). Scanners only recover structure; the
patterns they match come from the SyntaxProfile they are created with.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from .models import ClassRecord, ConstructorRecord, InterfaceRecord, MethodRecord
from .utils import collect_parenthesized, count_braces, leading_indent, paren_balance, split_parameters

if TYPE_CHECKING:
    from .profiles import SyntaxProfile


class ScanState(Enum):
    """States of the per-line walk."""
    OUTSIDE = "outside"
    IN_CLASS = "in_class"
    IN_METHOD = "in_method"
    IN_CONSTRUCTOR = "in_constructor"


@dataclass
class ScannerBase:
    profile: "SyntaxProfile"
    classes: List[ClassRecord] = field(default_factory=list)

    def scan(self, lines: List[str]) -> List[ClassRecord]:
        raise NotImplementedError

    def scan_interfaces(self, lines: List[str]) -> List[InterfaceRecord]:
        raise NotImplementedError

    def _record_references(self, line: str, method: MethodRecord, owner: ClassRecord) -> None:
        for name, is_call in self.profile.iter_self_references(line):
            if is_call:
                method.called_methods.add(name)
            else:
                method.used_variables.add(name)
                owner.instance_variables.add(name)

    @staticmethod
    def _parameter_names(params_text: str) -> List[str]:
        return split_parameters(params_text)


class IndentationScanner(ScannerBase):
    """Scanner for indentation-delimited source (Python)."""

    def scan(self, lines: List[str]) -> List[ClassRecord]:
        self.classes = []
        profile = self.profile
        state = ScanState.OUTSIDE
        current_class: Optional[ClassRecord] = None
        current_method: Optional[MethodRecord] = None
        class_indent = 0
        method_indent = 0
        open_parens = 0

        for i, line in enumerate(lines):
            stripped = line.strip()
            indent = leading_indent(line)

            # Continuation of a signature spanning several lines
            if state is ScanState.IN_METHOD and open_parens > 0:
                open_parens += paren_balance(line)
                current_method.header_end_line = i
                current_method.end_line = i
                continue

            if not stripped:
                continue

            in_body = state is ScanState.IN_METHOD and indent > method_indent

            class_match = profile.class_pattern.match(stripped)
            if class_match and not in_body:
                self._close_class(current_class, current_method, i - 1)
                current_class = ClassRecord(name=class_match.group(1), start_line=i, end_line=i)
                current_method = None
                class_indent = indent
                state = ScanState.IN_CLASS
                continue

            if state is ScanState.OUTSIDE:
                continue

            if indent <= class_indent:
                self._close_class(current_class, current_method, i - 1)
                current_class = None
                current_method = None
                state = ScanState.OUTSIDE
                continue

            if in_body:
                current_method.end_line = i
                self._record_references(line, current_method, current_class)
                continue

            method_match = profile.method_pattern.match(stripped)
            if method_match:
                if current_method:
                    current_class.methods.append(current_method)
                current_method = MethodRecord(name=method_match.group(1), start_line=i, end_line=i)
                method_indent = indent
                open_parens = max(0, paren_balance(line))
                state = ScanState.IN_METHOD
                continue

            # Anything else back at the method baseline ends the method
            if current_method:
                current_class.methods.append(current_method)
                current_method = None
            state = ScanState.IN_CLASS

        self._close_class(current_class, current_method, len(lines) - 1)
        for class_record in self.classes:
            class_record.constructor = self._find_constructor(lines, class_record)
        return self.classes

    def _close_class(self, current_class: Optional[ClassRecord],
                     current_method: Optional[MethodRecord], end_line: int) -> None:
        if current_class is None:
            return
        if current_method:
            current_class.methods.append(current_method)
        current_class.end_line = max(current_class.start_line, end_line)
        self.classes.append(current_class)

    def _find_constructor(self, lines: List[str], class_record: ClassRecord) -> Optional[ConstructorRecord]:
        constructor_name = self.profile.constructor_name
        for method in class_record.methods:
            if method.name != constructor_name:
                continue
            header = lines[method.start_line]
            params_text, _ = collect_parenthesized(lines, method.start_line, header.find(constructor_name))
            params = []
            for param in self._parameter_names(params_text):
                bare = re.split(r'[:=]', param, maxsplit=1)[0].strip()
                if bare in ("self", "*", "/"):
                    continue
                params.append(param)
            return ConstructorRecord(start_line=method.start_line, end_line=method.end_line, params=params)
        return None

    def scan_interfaces(self, lines: List[str]) -> List[InterfaceRecord]:
        profile = self.profile
        interfaces: List[InterfaceRecord] = []
        current: Optional[InterfaceRecord] = None
        class_indent = 0

        def flush():
            if current is not None and current.abstract_method_count > 0:
                interfaces.append(current)

        for i, line in enumerate(lines):
            stripped = line.strip()
            indent = leading_indent(line)

            if profile.class_pattern.match(stripped):
                flush()
                current = None
                declaration = profile.interface_class_pattern.match(stripped)
                if declaration and profile.interface_base_pattern.search(declaration.group(2)):
                    current = InterfaceRecord(name=declaration.group(1), start_line=i)
                    class_indent = indent
                continue

            if current is None or not stripped:
                continue

            if indent <= class_indent:
                flush()
                current = None
                continue

            if stripped.startswith(profile.abstract_marker):
                method_name = self._decorated_method(lines, i + 1)
                if method_name:
                    current.abstract_method_count += 1
                    current.methods.append(method_name)

        flush()
        return interfaces

    def _decorated_method(self, lines: List[str], start: int) -> Optional[str]:
        """Name of the def that follows a decorator, skipping stacked decorators."""
        for line in lines[start:]:
            stripped = line.strip()
            if not stripped or stripped.startswith("@"):
                continue
            match = self.profile.method_pattern.match(stripped)
            return match.group(1) if match else None
        return None


class BraceScanner(ScannerBase):
    """Scanner for brace-delimited source (TypeScript / JavaScript)."""

    def scan(self, lines: List[str]) -> List[ClassRecord]:
        self.classes = []
        profile = self.profile
        state = ScanState.OUTSIDE
        current_class: Optional[ClassRecord] = None
        current_method: Optional[MethodRecord] = None
        constructor: Optional[ConstructorRecord] = None
        depth = 0
        class_depth = 0
        member_depth = 0

        for i, line in enumerate(lines):
            stripped = line.strip()
            opens, closes = count_braces(line)

            class_match = profile.class_pattern.match(stripped) if depth == 0 else None
            if class_match:
                if current_class is not None:
                    # Header without a body, e.g. a declaration that never opened a brace
                    self._finish_class(current_class, current_method, i - 1)
                current_class = ClassRecord(name=class_match.group(1), start_line=i, end_line=i)
                current_method = None
                constructor = None
                class_depth = depth
                state = ScanState.IN_CLASS
            elif state is ScanState.IN_CLASS and depth == class_depth + 1:
                if profile.constructor_pattern.match(stripped):
                    params_text, _ = collect_parenthesized(lines, i, line.find("constructor"))
                    constructor = ConstructorRecord(
                        start_line=i, end_line=i, params=self._parameter_names(params_text)
                    )
                    current_class.constructor = constructor
                    member_depth = depth
                    state = ScanState.IN_CONSTRUCTOR
                else:
                    method_match = profile.method_pattern.match(stripped)
                    if (method_match and method_match.group(1) not in profile.reserved_names
                            and not self._is_bodiless_signature(stripped)):
                        current_method = MethodRecord(name=method_match.group(1), start_line=i, end_line=i)
                        member_depth = depth
                        state = ScanState.IN_METHOD

            if state is ScanState.IN_METHOD:
                current_method.end_line = i
                self._record_references(line, current_method, current_class)
            elif state is ScanState.IN_CONSTRUCTOR:
                constructor.end_line = i

            depth = max(0, depth + opens - closes)

            if state in (ScanState.IN_METHOD, ScanState.IN_CONSTRUCTOR) and closes > 0 and depth <= member_depth:
                if current_method is not None:
                    current_class.methods.append(current_method)
                    current_method = None
                state = ScanState.IN_CLASS

            if current_class is not None and depth == 0 and closes > 0:
                self._finish_class(current_class, current_method, i)
                current_class = None
                current_method = None
                state = ScanState.OUTSIDE

        if current_class is not None:
            self._finish_class(current_class, current_method, len(lines) - 1)
        return self.classes

    @staticmethod
    def _is_bodiless_signature(stripped: str) -> bool:
        # Overload and abstract signatures end with ';' and never open a body
        return "{" not in stripped and stripped.endswith(";")

    def _finish_class(self, current_class: ClassRecord, current_method: Optional[MethodRecord],
                      end_line: int) -> None:
        if current_method is not None:
            current_method.end_line = min(current_method.end_line, max(current_class.start_line, end_line))
            current_class.methods.append(current_method)
        current_class.end_line = max(current_class.start_line, end_line)
        self.classes.append(current_class)

    def scan_interfaces(self, lines: List[str]) -> List[InterfaceRecord]:
        profile = self.profile
        interfaces: List[InterfaceRecord] = []
        current: Optional[InterfaceRecord] = None
        depth = 0

        for i, line in enumerate(lines):
            stripped = line.strip()
            opens, closes = count_braces(line)

            if depth == 0:
                declaration = profile.interface_pattern.match(stripped) or profile.abstract_class_pattern.match(stripped)
                if declaration:
                    current = InterfaceRecord(name=declaration.group(1), start_line=i)
            elif current is not None and depth == 1 and "{" not in stripped:
                signature = profile.signature_pattern.match(stripped)
                if signature and signature.group(1) not in profile.reserved_names:
                    current.abstract_method_count += 1
                    current.methods.append(signature.group(1))

            depth = max(0, depth + opens - closes)

            if current is not None and depth == 0 and closes > 0:
                if current.abstract_method_count > 0:
                    interfaces.append(current)
                current = None

        if current is not None and current.abstract_method_count > 0:
            logging.debug("Unterminated interface %s at end of input", current.name)
            interfaces.append(current)
        return interfaces
