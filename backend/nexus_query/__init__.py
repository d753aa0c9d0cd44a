"""NEXUS Query — scoped, filtered, paginated reads over SQLAlchemy models."""

__version__ = "0.1.0"
