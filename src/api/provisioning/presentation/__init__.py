"""HTTP presentation layer for the Provisioning bounded context."""

from provisioning.presentation.routes import router

__all__ = ["router"]
