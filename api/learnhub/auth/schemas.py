"""Pydantic schemas for identity-provider profile updates."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PublicMetadata(BaseModel):
    """Profile fields kept in the identity provider's public metadata."""

    model_config = ConfigDict(populate_by_name=True)

    user_type: str | None = Field(None, alias="userType")
    settings: dict[str, Any] | None = None


class UpdateUserRequest(BaseModel):
    """User profile update."""

    model_config = ConfigDict(populate_by_name=True)

    public_metadata: PublicMetadata = Field(
        default_factory=PublicMetadata, alias="publicMetadata"
    )
