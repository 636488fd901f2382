from __future__ import annotations

import secrets
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from google.cloud import storage
from werkzeug.utils import secure_filename

from .config import Settings
from .errors import FileTooLarge, UnsupportedFileType

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "application/pdf": ".pdf",
}
MAX_FILE_SIZE = 10 * 1024 * 1024
UPLOAD_URL_EXPIRATION = timedelta(minutes=5)


class UploadService:
    """Issues signed Cloud Storage URLs so clients upload files directly."""

    def __init__(
        self,
        *,
        bucket_name: Optional[str],
        environment: str = "preprod",
        project: Optional[str] = None,
        client: Optional[storage.Client] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._bucket_name = bucket_name
        self._environment = environment
        self._project = project
        self._client = client
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadService":
        return cls(
            bucket_name=settings.upload_bucket,
            environment=settings.environment,
            project=settings.gcp_project,
        )

    def validate_file_type(self, content_type: str) -> None:
        if content_type not in EXTENSIONS:
            raise UnsupportedFileType(
                f"File type not allowed. Accepted types: {', '.join(EXTENSIONS)}"
            )

    def validate_file_size(self, size: int) -> None:
        if size > MAX_FILE_SIZE:
            raise FileTooLarge(
                f"File too large. Maximum size: {MAX_FILE_SIZE // (1024 * 1024)}MB"
            )

    def build_object_key(self, content_type: str) -> str:
        timestamp = int(self._clock() * 1000)
        return f"{self._environment}/{timestamp}-{secrets.token_hex(8)}{EXTENSIONS.get(content_type, '')}"

    def generate_presigned_upload_url(
        self, file_name: str, content_type: str, file_size: int
    ) -> Dict[str, Any]:
        self.validate_file_type(content_type)
        self.validate_file_size(file_size)

        if not self._bucket_name:
            raise RuntimeError("A Cloud Storage bucket must be configured to upload files.")

        key = self.build_object_key(content_type)
        blob = self._get_client().bucket(self._bucket_name).blob(key)
        upload_url = blob.generate_signed_url(
            version="v4",
            method="PUT",
            expiration=UPLOAD_URL_EXPIRATION,
            content_type=content_type,
            headers={"x-goog-meta-original-name": secure_filename(file_name)},
        )

        return {
            "uploadUrl": upload_url,
            "key": key,
            "bucket": self._bucket_name,
            "expiresIn": int(UPLOAD_URL_EXPIRATION.total_seconds()),
        }

    def _get_client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client(project=self._project)
        return self._client


__all__ = ["MAX_FILE_SIZE", "UploadService"]
