"""Linux hardware information parsers, device access helpers and sensor alerts."""

__version__ = "0.1.2"