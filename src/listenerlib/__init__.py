"""listenerlib: standardized, queue-backed streaming for depth and range sensors."""

__version__ = "0.1.0"
