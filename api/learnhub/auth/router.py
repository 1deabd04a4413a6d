"""Identity-provider user profile endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from learnhub.auth.dependencies import CurrentUser, ensure_self
from learnhub.auth.identity import IdentityDirectoryClient
from learnhub.auth.schemas import UpdateUserRequest
from learnhub.config.settings import Settings, get_settings
from learnhub.core.errors import envelope


router = APIRouter(prefix="/users/clerk", tags=["users"])


def get_identity_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> IdentityDirectoryClient:
    return IdentityDirectoryClient(settings)


IdentityClientDep = Annotated[IdentityDirectoryClient, Depends(get_identity_client)]


@router.put("/{user_id}", summary="Update identity-provider profile")
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    identity_client: IdentityClientDep,
    user: CurrentUser,
) -> dict[str, Any]:
    """Update the caller's user type and settings."""
    ensure_self(user, user_id)
    updated = await identity_client.update_public_metadata(
        user_id,
        data.public_metadata.model_dump(by_alias=True, exclude_unset=True),
    )
    return envelope("User updated successfully", updated)
