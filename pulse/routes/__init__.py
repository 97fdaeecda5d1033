"""Routes package for FastAPI endpoints.

This package contains all API route modules for Psychosocial Pulse.
"""

from pulse.routes import health, sessions, surveys, users

__all__ = ["health", "sessions", "surveys", "users"]
