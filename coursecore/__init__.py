"""Course lifecycle and enrollment-management core."""

__version__ = "0.1.0"
