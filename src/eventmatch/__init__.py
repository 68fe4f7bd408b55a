"""Event-scoped matching and conversation engine."""

__version__ = "0.1.0"
