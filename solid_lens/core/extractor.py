"""
Structural extractor facade.

Turns raw file text plus a language identifier into one SourceModel that the
principle analyzers consume independently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .models import ClassRecord, ImplementationRecord, SourceModel, StubMethod
from .profiles import STUB_EMPTY, SyntaxProfile, get_profile, language_for_path
from .utils import split_lines


@dataclass
class StructuralExtractor:
    """Recovers classes, interfaces and implementations from source text."""

    def extract(self, text: str, language_id: Optional[str]) -> SourceModel:
        """
        Extract the structural model of one file.

        Args:
            text: Full file contents
            language_id: Declared language identifier ('python', 'typescript', ...)

        Returns:
            SourceModel; empty when the language is unsupported
        """
        profile = get_profile(language_id)
        if profile is None:
            logging.debug(f"No syntax profile for language '{language_id}', skipping extraction")
            return SourceModel(language_id=language_id or "")

        lines = split_lines(text)
        scanner = profile.create_scanner()
        classes = scanner.scan(lines)
        interfaces = scanner.scan_interfaces(lines) if profile.supports_interfaces else []
        implementations = [self._build_implementation(record, lines, profile) for record in classes]

        return SourceModel(
            language_id=profile.language_id,
            classes=classes,
            interfaces=interfaces,
            implementations=implementations,
            lines=lines,
            profile=profile,
        )

    def extract_from_file(self, file_path: Union[str, Path], language_id: Optional[str] = None) -> SourceModel:
        path = Path(file_path)
        language = language_id or language_for_path(path)
        text = path.read_text(encoding="utf-8")
        return self.extract(text, language)

    @staticmethod
    def _build_implementation(record: ClassRecord, lines: List[str], profile: SyntaxProfile) -> ImplementationRecord:
        implementation = ImplementationRecord(
            name=record.name,
            start_line=record.start_line,
            total_methods=len(record.methods),
        )
        for method in record.methods:
            if profile.skips_stub_check(method.name):
                continue
            stub_kind = profile.classify_stub(method.name, profile.method_body(lines, method))
            if stub_kind is None:
                continue
            stub = StubMethod(name=method.name, line=method.start_line, code=profile.stub_code(method.name, stub_kind))
            if stub_kind == STUB_EMPTY:
                implementation.empty_methods.append(stub)
            else:
                implementation.not_implemented_methods.append(stub)
        return implementation
