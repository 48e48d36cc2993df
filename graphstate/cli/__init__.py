"""Command-line interface for graphstate."""
