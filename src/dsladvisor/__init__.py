"""Evidence-based DSL improvement advisor."""

__version__ = "0.1.0"
