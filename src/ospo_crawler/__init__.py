"""ospo-crawler: GitHub fetch layer for the OSPO crawler."""

__version__ = "0.1.0"
