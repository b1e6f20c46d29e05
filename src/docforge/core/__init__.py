"""Core building blocks: error taxonomy, field types, configuration."""
