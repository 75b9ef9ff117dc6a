"""
Google Cloud Storage service for uploaded product images.

Images are written once under ``product-images/<owner>/`` and read back
through time-limited signed URLs.
"""

import hashlib
import time
from datetime import timedelta
from typing import Optional, Tuple
from google.cloud import storage
from google.api_core import exceptions
from app.core.config import config
from app.core.exceptions import ExternalServiceError


class StorageService:
    """
    Thin GCS wrapper used by product analysis.

    Design Principles:
    1. Write once, read many (immutable files)
    2. Use signed URLs for direct downloads
    3. Disabled when GCP_BUCKET_NAME is empty
    """

    _client: Optional[storage.Client] = None
    _bucket_name: str = config.gcp_bucket_name

    @classmethod
    def is_enabled(cls) -> bool:
        return bool(cls._bucket_name)

    @classmethod
    def _get_client(cls) -> storage.Client:
        """Lazy-load the GCS client so importing this module needs no credentials."""
        if cls._client is None:
            cls._client = storage.Client(project=config.gcp_project_id or None)
        return cls._client

    @classmethod
    def _get_bucket(cls) -> storage.Bucket:
        return cls._get_client().bucket(cls._bucket_name)

    @staticmethod
    def build_image_key(owner_id: str, filename: str) -> str:
        safe_name = (filename or "image").replace("/", "_")
        return f"product-images/{owner_id}/{int(time.time() * 1000)}_{safe_name}"

    @classmethod
    def upload_image(
        cls,
        file_content: bytes,
        file_key: str,
        content_type: str,
    ) -> Tuple[str, str]:
        """
        Upload an image in a single PUT request.

        Returns:
            Tuple[str, str]: (file_key, md5 checksum)
        Raises:
            ExternalServiceError: On upload failure
        """
        blob = cls._get_bucket().blob(file_key)
        checksum: str = hashlib.md5(file_content).hexdigest()

        try:
            blob.upload_from_string(file_content, content_type=content_type)
        except exceptions.GoogleAPIError as e:
            raise ExternalServiceError("Storage", f"upload failed: {e}") from e
        return file_key, checksum

    @classmethod
    def generate_signed_url(cls, file_key: str, expiration_days: Optional[int] = None) -> str:
        """
        Generate a temporary signed URL for reading an uploaded image.

        Raises:
            ExternalServiceError: On signing failure
        """
        days = expiration_days or config.signed_url_expiry_days
        blob = cls._get_bucket().blob(file_key)
        try:
            return blob.generate_signed_url(expiration=timedelta(days=days), method="GET")
        except exceptions.GoogleAPIError as e:
            raise ExternalServiceError("Storage", f"signing failed: {e}") from e
