"""Shared utilities: errors, logging, console output and paths."""
