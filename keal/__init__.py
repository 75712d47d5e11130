"""Core of a plugin-driven application launcher: configuration, plugins, fuzzy matching."""

__version__ = "0.1.0"