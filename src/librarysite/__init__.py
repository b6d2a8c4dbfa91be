"""Public website and books admin panel for a community library."""

__version__ = "0.1.0"
