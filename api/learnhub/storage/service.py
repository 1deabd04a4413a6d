"""Object storage service (Google Cloud Storage through Firebase Admin).

Handles:
- Signed upload URLs for direct client-to-storage video uploads
- Course image uploads routed through the API
- Public delivery URLs built from the configured CDN domain
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import quote
from uuid import uuid4

import structlog


if TYPE_CHECKING:
    from google.cloud.storage import Blob, Bucket

from learnhub.config.settings import Settings
from learnhub.core.errors import ConfigurationError, UpstreamError, ValidationError


logger = structlog.get_logger(__name__)


# Firebase app singleton
_firebase_app = None


def _init_bucket(settings: Settings) -> "Bucket":
    """Initialize Firebase Admin SDK and return the configured bucket.

    Without a credentials file, application default credentials are used.

    Raises:
        ConfigurationError: If no bucket is configured or the SDK fails to start.
    """
    global _firebase_app  # noqa: PLW0603

    if not settings.storage_configured:
        raise ConfigurationError("Storage bucket is not configured")

    # Lazy import to avoid loading Firebase SDK unless needed
    import firebase_admin  # noqa: PLC0415
    from firebase_admin import credentials, storage  # noqa: PLC0415

    try:
        if _firebase_app is None:
            creds_path = settings.firebase_credentials_path
            cred = credentials.Certificate(creds_path) if creds_path else None
            _firebase_app = firebase_admin.initialize_app(
                cred,
                {
                    "storageBucket": settings.firebase_storage_bucket,
                    "projectId": settings.firebase_project_id,
                },
            )
            logger.info(
                "firebase_initialized",
                project_id=settings.firebase_project_id,
                bucket=settings.firebase_storage_bucket,
            )
        return storage.bucket(settings.firebase_storage_bucket)
    except Exception as e:
        logger.exception("firebase_init_failed", error=str(e))
        raise ConfigurationError("Failed to initialize storage", str(e)) from e


class StorageService:
    """Issues signed upload URLs and stores course images."""

    VIDEO_PREFIX = "videos"
    IMAGE_PREFIX = "images/courses"

    def __init__(self, settings: Settings, bucket: "Bucket | None" = None) -> None:
        """Initialize storage service.

        Args:
            settings: Application settings.
            bucket: Pre-built bucket handle; resolved lazily when omitted.
        """
        self.settings = settings
        self._bucket = bucket

    @property
    def url_expiry(self) -> timedelta:
        return timedelta(seconds=self.settings.upload_url_expiry_seconds)

    @property
    def max_image_size(self) -> int:
        """Maximum course image size in bytes."""
        return self.settings.upload_max_file_size_mb * 1024 * 1024

    def _get_bucket(self) -> "Bucket":
        if self._bucket is None:
            self._bucket = _init_bucket(self.settings)
        return self._bucket

    def public_url(self, key: str) -> str:
        """Delivery URL for a stored key.

        Uses the CDN domain when configured, otherwise the bucket's public
        storage endpoint.
        """
        if self.settings.storage_cdn_domain:
            return f"{self.settings.storage_cdn_domain.rstrip('/')}/{key}"
        encoded = "/".join(quote(part, safe="") for part in key.split("/"))
        return f"https://storage.googleapis.com/{self.settings.firebase_storage_bucket}/{encoded}"

    def generate_upload_url(
        self,
        file_name: str | None,
        file_type: str | None,
    ) -> dict[str, str]:
        """Create a signed PUT URL for a video upload.

        Returns:
            Dict with `uploadUrl` (signed, short-lived) and `videoUrl` (public).

        Raises:
            ValidationError: If file name or type is missing.
            ConfigurationError: If storage is not configured.
            UpstreamError: If signing fails.
        """
        if not file_name or not file_type:
            logger.warning(
                "upload_url_validation_failed", file_name=file_name, file_type=file_type
            )
            raise ValidationError("File name and type are required")

        if not self.settings.storage_configured:
            raise ConfigurationError("Storage bucket is not configured")

        key = f"{self.VIDEO_PREFIX}/{uuid4()}/{file_name}"

        try:
            blob: Blob = self._get_bucket().blob(key)
            upload_url = blob.generate_signed_url(
                version="v4",
                expiration=self.url_expiry,
                method="PUT",
                content_type=file_type,
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception("upload_url_generation_failed", key=key, error=str(e))
            raise UpstreamError("Error generating upload URL", str(e)) from e

        logger.info("upload_url_generated", key=key, content_type=file_type)
        return {"uploadUrl": upload_url, "videoUrl": self.public_url(key)}

    async def upload_course_image(
        self,
        content: bytes,
        content_type: str,
        course_id: str,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Upload a course cover image and make it publicly readable.

        Raises:
            ValidationError: If the image is too large or not an allowed type.
            ConfigurationError: If storage is not configured.
            UpstreamError: If the upload fails.
        """
        if len(content) > self.max_image_size:
            raise ValidationError(
                "Image is too large",
                f"Maximum allowed size is {self.settings.upload_max_file_size_mb} MB",
            )
        if content_type not in self.settings.upload_allowed_image_types:
            raise ValidationError(
                "Image type is not allowed",
                f"Allowed: {', '.join(self.settings.upload_allowed_image_types)}",
            )

        timestamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        suffix = Path(filename).suffix.lower() if filename else ""
        key = f"{self.IMAGE_PREFIX}/{course_id}_{timestamp}{suffix}"

        try:
            blob: Blob = self._get_bucket().blob(key)
            blob.cache_control = "public, max-age=31536000, immutable"
            blob.upload_from_string(content, content_type=content_type)
            blob.make_public()
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception("image_upload_failed", key=key, error=str(e))
            raise UpstreamError("Error uploading course image", str(e)) from e

        logger.info(
            "course_image_uploaded",
            key=key,
            content_type=content_type,
            file_size=len(content),
            course_id=course_id,
        )
        return {"key": key, "url": self.public_url(key)}
