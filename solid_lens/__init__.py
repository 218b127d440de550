"""solid-lens: heuristic SOLID principle checks for Python and TypeScript/JavaScript."""

__version__ = "0.1.0"
