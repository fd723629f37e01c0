"""HTTP presentation layer for the Tenancy bounded context."""

from tenancy.presentation.routes import router

__all__ = ["router"]
