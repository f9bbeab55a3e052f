"""Route modules exposed by the API package."""

from . import metrics, ping, turns

__all__ = ["metrics", "ping", "turns"]
