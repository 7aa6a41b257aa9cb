from __future__ import annotations

from fastapi import Request

from ..repositories import Repository, SecretRepository, Stores


def _stores(request: Request) -> Stores:
    stores = getattr(request.app.state, "stores", None)
    if stores is None:
        raise RuntimeError("Stores not available on app.state (lifespan not initialized).")
    return stores


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """Dependency returning the todo store the application was built with."""
    return _stores(request).todos


# PUBLIC_INTERFACE
def get_secret_repository(request: Request) -> SecretRepository:
    """Dependency returning the secrets store the application was built with."""
    return _stores(request).secrets
