"""
API routes package.

Route tables for the users (`/api/usuarios`) and pets (`/api/mascotas`)
collections.
"""

from src.api.routes.pets import router as pets_router
from src.api.routes.users import router as users_router

__all__ = ["pets_router", "users_router"]
