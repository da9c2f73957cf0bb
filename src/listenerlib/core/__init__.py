"""Core types, errors, configuration and listener assembly."""
