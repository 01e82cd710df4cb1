"""finlit: financial calculation engine for personal-finance literacy tools."""

__version__ = "0.1.0"
