"""HTTP API routers."""

from autobiography.api.router import api_router

__all__ = ["api_router"]
