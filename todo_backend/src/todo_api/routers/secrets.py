from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from ..repositories import SecretRepository
from ..schemas import ErrorEnvelope, SecretIn, SecretOut
from .deps import get_secret_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/secrets",
    tags=["secrets"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=SecretOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Secret",
    description="Store an opaque secret key and return the created record.",
    responses={
        400: {"model": ErrorEnvelope, "description": "Invalid request body"},
        500: {"model": ErrorEnvelope, "description": "Storage failure"},
    },
)
def create_secret(payload: SecretIn, repo: SecretRepository = Depends(get_secret_repository)) -> SecretOut:
    created = repo.insert(payload.key)
    logger.info("Created secret id=%s", created["id"])
    return SecretOut(**created)
