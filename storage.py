import mimetypes
import os
import random
import time
from typing import Iterable, Optional

import aiofiles
from fastapi import UploadFile

from constants import ALLOWED_VIDEO_EXTENSIONS, VIDEO_URL_PREFIX
from logging_config import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024

# Extensions the platform mimetypes table may not know
VIDEO_MEDIA_TYPES = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogg": "video/ogg",
    ".mkv": "video/x-matroska",
    ".wmv": "video/x-ms-wmv",
}


class VideoStore:
    """Disk-backed store for uploaded videos, addressed by server-relative paths.

    The directory is created by ensure_directory() (app startup) or on the
    first save, never at construction.
    """

    def __init__(self, directory: str, url_prefix: str = VIDEO_URL_PREFIX,
                 allowed_extensions: Iterable[str] = ALLOWED_VIDEO_EXTENSIONS):
        self.directory = os.path.abspath(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)

    def ensure_directory(self):
        if not os.path.isdir(self.directory):
            os.makedirs(self.directory, exist_ok=True)
            logger.info(f"Created video directory {self.directory}")

    def is_allowed(self, filename: Optional[str], content_type: Optional[str]) -> bool:
        """A video media type or an allowed extension is enough."""
        if content_type and content_type.lower().startswith("video/"):
            return True
        ext = os.path.splitext(filename or "")[1].lower()
        return ext in self.allowed_extensions

    def stored_name(self, filename: str) -> str:
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{unique_suffix}-{os.path.basename(filename)}"

    async def save(self, upload: UploadFile) -> str:
        """Stream the upload to disk and return the path clients load it from."""
        self.ensure_directory()
        filename = upload.filename or "video"
        name = self.stored_name(filename)
        total = 0
        async with aiofiles.open(os.path.join(self.directory, name), "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                await out.write(chunk)
                total += len(chunk)
        logger.info(f"Stored upload {filename!r} as {name} ({total} bytes)")
        return f"{self.url_prefix}/{name}"

    @staticmethod
    def media_type_for(path: str) -> Optional[str]:
        ext = os.path.splitext(path)[1].lower()
        if ext in VIDEO_MEDIA_TYPES:
            return VIDEO_MEDIA_TYPES[ext]
        return mimetypes.guess_type(path)[0]
