"""Core infrastructure: configuration, constants, exceptions and formatting helpers."""
