"""Command-line interface for alias-delegation."""
