# app/storage/blobs.py
import logging
import mimetypes
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    @abstractmethod
    def store(self, data: bytes, content_type: str) -> str:
        """Persist the bytes and return a URL they can be fetched from."""


class LocalBlobStore(BlobStore):
    """Writes blobs under ``root_dir`` and links them from ``base_url``."""

    def __init__(self, root_dir: str | Path, base_url: str):
        self.root_dir = Path(root_dir).resolve()
        self.base_url = base_url.rstrip("/")

    def store(self, data: bytes, content_type: str) -> str:
        suffix = mimetypes.guess_extension(content_type) or ".bin"
        key = f"tickets/{int(time.time() * 1000)}-{uuid.uuid4().hex}{suffix}"
        dest = self.root_dir / key
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(data)
        except OSError as exc:
            raise UpstreamError("Could not store attachment", str(exc)) from exc

        logger.info("Stored attachment %s (%d bytes)", key, len(data))
        return f"{self.base_url}/{key}"
