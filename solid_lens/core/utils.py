"""
Shared utility functions for structural scanning.

Pure helpers used by both scanners and the analyzers: content hashing for the
scan cache, line splitting, indentation and bracket counting, parameter list
splitting, and gitignore-aware source file discovery.
"""

import fnmatch
import hashlib
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

_OPENERS = "([{"
_CLOSERS = ")]}"

_STRING_LITERAL = re.compile(r"""'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|`(?:\\.|[^`\\])*`""")


# --- Content hashing ---

def content_hash(text: str) -> str:
    """
    Generates an MD5 hash of a document's full text.

    Args:
        text: Document contents

    Returns:
        MD5 hex digest
    """
    return hashlib.md5(text.encode('utf-8')).hexdigest()


# --- Line helpers ---

def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping a trailing carriage return from each line."""
    return [line[:-1] if line.endswith('\r') else line for line in text.split('\n')]


def leading_indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def count_braces(line: str) -> Tuple[int, int]:
    """Return (opening, closing) curly brace counts for a line."""
    return line.count('{'), line.count('}')


def strip_string_literals(text: str) -> str:
    """Blank out single-line string literals so brackets inside them are not counted."""
    return _STRING_LITERAL.sub(lambda m: m.group(0)[0] * 2, text)


def paren_balance(text: str) -> int:
    text = strip_string_literals(text)
    return text.count('(') - text.count(')')


def collect_parenthesized(lines: Sequence[str], start_idx: int, anchor: int = 0) -> Tuple[str, int]:
    """
    Collect the text between the first '(' at or after `anchor` on
    `lines[start_idx]` and its matching ')', following continuation lines.

    Args:
        lines: Source lines
        start_idx: Line holding the opening parenthesis
        anchor: Column to start looking for the parenthesis

    Returns:
        (inner_text, closing_line_index). If the parenthesis never closes,
        everything up to the end of input is returned.
    """
    depth = 0
    started = False
    parts: List[str] = []
    for idx in range(start_idx, len(lines)):
        line = lines[idx]
        column = anchor if idx == start_idx else 0
        buffer = []
        quote = None
        escaped = False
        for char in line[column:]:
            if not started:
                if char == '(':
                    started = True
                    depth = 1
                continue
            if quote:
                buffer.append(char)
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == quote:
                    quote = None
                continue
            if char in '"\'`':
                quote = char
            elif char == '(':
                depth += 1
            elif char == ')':
                depth -= 1
                if depth == 0:
                    parts.append(''.join(buffer))
                    return ' '.join(p.strip() for p in parts if p.strip()), idx
            buffer.append(char)
        if started:
            parts.append(''.join(buffer))
        elif idx == start_idx:
            return "", start_idx
    return ' '.join(p.strip() for p in parts if p.strip()), len(lines) - 1


def split_parameters(params_text: str) -> List[str]:
    """
    Split a parameter list on top-level commas.

    Commas nested inside brackets or generic angle brackets (for example in
    default values or type annotations) do not split.
    """
    params: List[str] = []
    depth = 0
    current: List[str] = []
    previous = ''
    for char in params_text:
        if char in _OPENERS or (char == '<' and previous != '='):
            depth += 1
        elif char in _CLOSERS or (char == '>' and previous != '='):
            depth = max(0, depth - 1)
        if char == ',' and depth == 0:
            params.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        previous = char
    params.append(''.join(current).strip())
    return [p for p in params if p]


# --- Source file discovery ---

def get_gitignore_patterns(directory: Path) -> List[Tuple[str, Path]]:
    """
    Collect .gitignore patterns from the directory and its parents, also
    returning the directory where each .gitignore file was found.
    """
    patterns_with_dirs: List[Tuple[str, Path]] = []
    current_dir = directory
    while current_dir != current_dir.parent:
        gitignore_path = current_dir / ".gitignore"
        if gitignore_path.exists() and gitignore_path.is_file():
            with open(gitignore_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and not line.startswith("!"):
                        patterns_with_dirs.append((line, current_dir))
        current_dir = current_dir.parent
    return patterns_with_dirs


def match_file_against_pattern(file_path: Path, pattern: str, base_dir: Path) -> bool:
    """
    Match a file against a gitignore-style pattern relative to `base_dir`.

    Directory patterns ('build/') and bare names ('venv') ignore everything
    beneath a matching path segment; patterns with a slash are anchored to
    `base_dir`.
    """
    pattern = pattern.strip().replace("\\", "/")
    if not pattern:
        return False
    try:
        relative = file_path.relative_to(base_dir).as_posix()
    except ValueError:
        return False

    anchored = pattern.startswith('/')
    pattern = pattern.strip('/')
    if pattern.startswith('**/'):
        pattern = pattern[3:]
        anchored = False
    if not pattern:
        return False

    if anchored or '/' in pattern:
        return fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(relative, pattern + '/*')

    segments = relative.split('/')
    return any(fnmatch.fnmatch(segment, pattern) for segment in segments)


def is_ignored_path(file_path: Path, root: Path, ignored_patterns: Iterable[str],
                    gitignore_patterns: Optional[List[Tuple[str, Path]]] = None) -> bool:
    for pattern in ignored_patterns:
        if match_file_against_pattern(file_path, pattern, root):
            return True
    for pattern, gitignore_dir in gitignore_patterns or []:
        if match_file_against_pattern(file_path, pattern, gitignore_dir):
            return True
    return False


def iter_source_files(directory: Path, extensions: Iterable[str],
                      ignored_patterns: Iterable[str] = ()) -> Iterator[Path]:
    """
    Yield files under `directory` with one of `extensions`, skipping paths
    matched by `ignored_patterns` or any applicable .gitignore.
    """
    root = directory.resolve()
    suffixes = {ext.lower() for ext in extensions}
    ignored = list(ignored_patterns)
    gitignore_patterns = get_gitignore_patterns(root)
    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file() or file_path.suffix.lower() not in suffixes:
            continue
        if is_ignored_path(file_path, root, ignored, gitignore_patterns):
            continue
        yield file_path
