"""Combined GitHub stats card service."""

__version__ = "1.0.0"
