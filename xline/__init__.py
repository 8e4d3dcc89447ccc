"""Request model, key-range conflict detection, request validation and lock helpers for a distributed key-value store."""

__version__ = "0.1.0"