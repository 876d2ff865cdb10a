"""10xR community platform service."""

__version__ = "0.1.0"
