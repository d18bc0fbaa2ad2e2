"""Utility modules shared across the package (logging, factories, timers)."""
