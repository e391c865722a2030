"""Command line interface for ospo-crawler."""
