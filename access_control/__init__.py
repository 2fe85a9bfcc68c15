"""Role-based access control engine with session-token lifecycle management."""

__version__ = "0.1.0"
