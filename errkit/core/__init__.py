"""Structured error core: type, constructors, catalog and stack capture."""
