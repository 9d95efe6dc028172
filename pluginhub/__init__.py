"""E-mail verified accounts, SHA-256 tokens, a SQLite schema with migrations and a plugin registry."""

__version__ = "0.1.0"