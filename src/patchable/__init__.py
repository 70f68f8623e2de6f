"""Resource-oriented customer service with JSON Patch and partial patch support."""

__version__ = "0.1.0"
