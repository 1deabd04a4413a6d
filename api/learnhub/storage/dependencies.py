"""Dependencies for storage module."""

from typing import Annotated

from fastapi import Depends

from learnhub.config.settings import Settings, get_settings
from learnhub.storage.service import StorageService


# Storage service singleton
_storage_service: StorageService | None = None


def get_storage_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageService:
    """Get storage service instance (singleton)."""
    global _storage_service  # noqa: PLW0603

    if _storage_service is None:
        _storage_service = StorageService(settings)

    return _storage_service


StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
