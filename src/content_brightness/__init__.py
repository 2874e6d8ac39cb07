"""Content-aware display brightness with online target learning."""

__version__ = "0.3.0"
