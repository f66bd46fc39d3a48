"""SDP parser differential comparator."""

__version__ = "1.0.0"
