import hashlib
import logging
from pydantic import BaseModel
from fastapi import HTTPException, Security, status, Depends
from fastapi.security import APIKeyHeader
from sqlmodel import Session

from config.settings import settings
from utils.database import get_engine
from repositories.api_key_repository import APIKeyRepository

logger = logging.getLogger(__name__)

# Define API Key security scheme for OpenAPI/Swagger
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=True)


class APIKeyContext(BaseModel):
    """Context info extracted from verified API key."""
    client_id: int
    api_key_id: int
    api_key_name: str


def hash_api_key(raw_key: str) -> str:
    """Derive deterministic hash for API key secrets."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


async def verify_api_key(api_key: str = Security(api_key_header)) -> APIKeyContext:
    """
    Dependency to verify the X-API-Key header against the api_keys table.

    Returns:
        APIKeyContext: Client ID and API key metadata for use in routes

    Raises:
        HTTPException: If the key is missing, unknown, inactive or not tied to a client
    """
    if not settings.DATABASE_URL:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database is not configured for API key validation",
        )

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    try:
        with Session(get_engine()) as session:
            repo = APIKeyRepository(session)
            record = repo.get_active_by_hash(hash_api_key(api_key))

            if not record:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid or inactive API key",
                    headers={"WWW-Authenticate": "ApiKey"},
                )

            if record.client_id is None or repo.get_client(record.client_id) is None:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="API key is not configured with a client",
                )

            repo.touch_last_used(record)

            return APIKeyContext(
                client_id=record.client_id,
                api_key_id=record.id,
                api_key_name=record.name,
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"API key validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to validate API key",
        )


def get_current_client(
    api_key_context: APIKeyContext = Depends(verify_api_key),
) -> int:
    """
    Client ID of the calling API key; every workflow query is scoped to it.

    Usage:
        @router.get("/nominations")
        def list_nominations(client_id: int = Depends(get_current_client)):
            ...
    """
    return api_key_context.client_id


def ensure_client_scope(owning_client_id, client_id: int, label: str) -> None:
    """
    Hide records of other clients behind a 404.

    Args:
        owning_client_id: Client the record belongs to (None when unknown)
        client_id: Client of the calling API key
        label: Record description used in the error message
    """
    if owning_client_id != client_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
