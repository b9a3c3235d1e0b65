"""Personal wellness tracker backed by per-user flat record files."""

__version__ = "0.1.0"
