"""Rule-based decision engine with a typed expression language."""

__version__ = "0.1.0"
