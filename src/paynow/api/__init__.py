"""Pay Now API package."""

from paynow.api.routes import router

__all__ = ["router"]
