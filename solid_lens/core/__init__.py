"""
Unified interface for SOLID analysis across the supported languages.

This module provides a small, consistent API for checking source text or
files without wiring the extractor and analyzers by hand.

Key Features:
- Language detection from file extensions
- One-call checks for text, files and directories
- Clean imports for models, analyzers and report builders
"""

from pathlib import Path
from typing import Iterator, List, Optional, Union

# Core data models
from .models import (
    ClassRecord,
    DIPResult,
    ISPResult,
    LCOM4Result,
    MethodRecord,
    OCPResult,
    SourceModel,
)

# Configuration
from .config import SolidLensConfig, load_config

# Extraction and analyzers
from .extractor import StructuralExtractor
from .cohesion import CohesionAnalyzer
from .type_checks import TypeCheckAnalyzer
from .dependencies import DependencyAnalyzer
from .interfaces import InterfaceAnalyzer
from .checker import CheckReport, SolidChecker
from .profiles import SUPPORTED_LANGUAGES, extensions_for_languages, get_profile, language_for_path
from .prompts import (
    build_combined_report,
    build_dip_prompt,
    build_isp_prompt,
    build_ocp_prompt,
    build_srp_prompt,
)
from .utils import iter_source_files

# Type alias for file paths
FilePath = Union[str, Path]


def check_text(text: str, language_id: str, path: FilePath = "<memory>",
               config: Optional[SolidLensConfig] = None) -> CheckReport:
    """
    Check source text held in memory.

    Example:
        >>> report = check_text(source, 'python')
        >>> print(report.report())
    """
    return SolidChecker(config).check(path, text, language_id)


def check_file(file_path: FilePath, config: Optional[SolidLensConfig] = None) -> CheckReport:
    """
    Check a single file, detecting its language from the extension.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return SolidChecker(config).check_file(path)


def iter_directory_files(directory_path: FilePath, config: Optional[SolidLensConfig] = None) -> Iterator[Path]:
    """Yield the files of a directory that a check would cover."""
    config = config or SolidLensConfig()
    directory = Path(directory_path)
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory_path}")
    return iter_source_files(directory, extensions_for_languages(config.languages), config.ignored_patterns)


def check_directory(directory_path: FilePath, config: Optional[SolidLensConfig] = None) -> List[CheckReport]:
    """
    Check every supported file under a directory, honoring .gitignore and
    the configured ignored patterns.
    """
    checker = SolidChecker(config)
    return [checker.check_file(path) for path in iter_directory_files(directory_path, checker.config)]


__all__ = [
    # Core models
    'ClassRecord',
    'MethodRecord',
    'SourceModel',
    'LCOM4Result',
    'OCPResult',
    'DIPResult',
    'ISPResult',

    # Configuration
    'SolidLensConfig',
    'load_config',

    # Extraction and analysis
    'StructuralExtractor',
    'CohesionAnalyzer',
    'TypeCheckAnalyzer',
    'DependencyAnalyzer',
    'InterfaceAnalyzer',
    'SolidChecker',
    'CheckReport',

    # Languages
    'SUPPORTED_LANGUAGES',
    'get_profile',
    'language_for_path',

    # Reports
    'build_srp_prompt',
    'build_ocp_prompt',
    'build_dip_prompt',
    'build_isp_prompt',
    'build_combined_report',

    # Unified API functions
    'check_text',
    'check_file',
    'check_directory',
    'iter_directory_files',

    # Type aliases
    'FilePath',
]
