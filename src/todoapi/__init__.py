"""Todo API - Todo backend with HTTP Basic and JWT authentication."""

__version__ = "0.1.0"

from todoapi.infrastructure.api.app import app

__all__ = ["app", "__version__"]
