"""
Object Storage Service for the arrival card service

Issued PDFs are stored on the persistent disk, one flat directory per bucket:

/var/arrival-card-data/
└── pdfs/
    └── {unique_id}.pdf

Objects are written with exclusive create, so an existing key is never
overwritten; the upload is rejected instead.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from app.core.errors import PublishError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ObjectStore(Protocol):
    """Key/value blob store with upload-if-absent and public URL resolution"""

    def upload(self, key: str, data: bytes, content_type: str) -> str: ...

    def public_url(self, key: str) -> str: ...


def validate_object_key(key: str) -> str:
    """Keys are flat file names; path separators and '..' are rejected"""
    if not key or not _KEY_PATTERN.match(key) or ".." in key:
        raise PublishError(f"Invalid object key: {key!r}")
    return key


class LocalObjectStore:
    """ObjectStore on the local/persistent disk, served by the /files endpoints"""

    def __init__(self, base_path: Path, bucket: str, public_base_url: str):
        self.bucket = validate_object_key(bucket)
        self.bucket_path = Path(base_path) / self.bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._ensure_directories()

    @classmethod
    def from_settings(cls, settings) -> "LocalObjectStore":
        return cls(settings.get_file_storage_path(), settings.PDF_BUCKET, settings.PUBLIC_BASE_URL)

    def _ensure_directories(self):
        try:
            self.bucket_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create bucket directory {self.bucket_path}: {e}")
            raise PublishError(f"Failed to initialize object storage: {str(e)}")

    def object_path(self, key: str) -> Path:
        return self.bucket_path / validate_object_key(key)

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        """
        Store data under key, refusing to replace an existing object

        Returns:
            The key the object was stored under
        """
        path = self.object_path(key)
        try:
            with open(path, "xb") as f:
                f.write(data)
        except FileExistsError:
            logger.error(f"Refusing to overwrite existing object {self.bucket}/{key}")
            raise PublishError(f"The resource already exists: {self.bucket}/{key}")
        except OSError as e:
            logger.error(f"Failed to store object {self.bucket}/{key}: {e}")
            raise PublishError(f"Upload failed for {self.bucket}/{key}: {str(e)}")

        logger.info(f"Stored {content_type} object {self.bucket}/{key} ({len(data):,} bytes)")
        return key

    def read(self, key: str) -> Optional[bytes]:
        path = self.object_path(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/files/{self.bucket}/{validate_object_key(key)}"


@dataclass(frozen=True)
class PublishedArtifact:
    key: str
    public_url: str


class ArtifactPublisher:
    """Uploads rendered arrival card PDFs under '<document identifier>.pdf'"""

    def __init__(self, store: ObjectStore):
        self.store = store

    @staticmethod
    def key_for(unique_id: str) -> str:
        return f"{unique_id}.pdf"

    def publish(self, unique_id: str, pdf_data: bytes) -> PublishedArtifact:
        key = self.key_for(unique_id)
        try:
            self.store.upload(key, pdf_data, PDF_CONTENT_TYPE)
            url = self.store.public_url(key)
        except PublishError:
            raise
        except Exception as e:
            logger.error(f"Upload error: {e}")
            raise PublishError(str(e))
        logger.info(f"PDF uploaded successfully: {url}")
        return PublishedArtifact(key=key, public_url=url)
