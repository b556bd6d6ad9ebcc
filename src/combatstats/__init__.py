"""Combat Stats API: read-only statistics for a Combat Arms game server."""

__version__ = "1.0.0"
