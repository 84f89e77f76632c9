"""Task auto-assignment for the Cehpoint Work portal."""

__version__ = "0.1.0"
