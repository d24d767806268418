"""
FastAPI dependencies: API-key check, storage client and gateway service.

Tests swap get_settings or get_storage_client via app.dependency_overrides.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.objects.gateway import ObjectGateway, ObjectStore
from ..core.objects.selector import ResponseSelector
from ..infrastructure.storage.client import StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# In mock mode every request must see the same in-memory buckets
_mock_storage_client: Optional[ObjectStore] = None


async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: Optional[str] = Security(api_key_header),
) -> str:
    """Accept the request only with a configured X-API-Key; 403 otherwise."""
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning("Invalid API key attempt", extra={"key_prefix": api_key[:4]})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


def storage_config_from(settings: Settings) -> StorageConfig:
    return StorageConfig(
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        endpoint_url=settings.r2_endpoint,
        region=settings.r2_region,
        connect_timeout_seconds=settings.r2_connect_timeout_seconds,
        read_timeout_seconds=settings.r2_read_timeout_seconds,
    )


def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ObjectStore:
    """R2 client built from settings, or the shared in-memory store in mock mode."""
    global _mock_storage_client

    if not settings.r2_mock_mode:
        return create_storage_client(config=storage_config_from(settings))

    if _mock_storage_client is None:
        _mock_storage_client = create_storage_client(mock_mode=True)
        logger.info("Created shared mock storage client")
    return _mock_storage_client


def get_object_gateway(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[ObjectStore, Depends(get_storage_client)],
) -> ObjectGateway:
    selector = ResponseSelector(
        temp_dir=settings.download_temp_dir,
        temp_prefix=settings.download_temp_prefix,
    )
    return ObjectGateway(store=storage, selector=selector)


AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
StorageClientDep = Annotated[ObjectStore, Depends(get_storage_client)]
ObjectGatewayDep = Annotated[ObjectGateway, Depends(get_object_gateway)]
