"""Tool definitions, tool collections and API client wrappers for PingOne applications and environments."""

__version__ = "0.1.0"