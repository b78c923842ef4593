"""Pydantic schemas for the serialized error form."""
