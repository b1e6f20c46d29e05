"""Effective class schema, field definitions and lifecycle events."""
