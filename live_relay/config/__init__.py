"""Env-resolved configuration constants."""

__all__: list[str] = []
