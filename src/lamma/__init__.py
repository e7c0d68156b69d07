"""lamma: local WordPress development environment manager."""

__version__ = "1.0.0"
