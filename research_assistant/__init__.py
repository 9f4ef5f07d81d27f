"""Research assistant backend: template-driven report generation from research papers."""

__version__ = "1.0.0"
