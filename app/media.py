import io
import itertools
import logging
import os
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}


class MediaStore:
    """Directory of uploaded product images, addressed by generated filename."""

    def __init__(self, root: str, url_prefix: str = "/uploads", max_bytes: int = 10 * 1024 * 1024):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes
        self._counter = itertools.count()

    def open(self):
        self.root.mkdir(parents=True, exist_ok=True)

    def read_upload(self, upload: UploadFile) -> bytes:
        """
        Validate an uploaded image and return its bytes.
        Raises ValidationError for a wrong extension, MIME type, size or undecodable content.
        """
        extension = os.path.splitext(upload.filename or "")[1].lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError("Invalid file type, only images are allowed!")
        if (upload.content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Invalid file type, only images are allowed!")

        data = upload.file.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            raise ValidationError(f"Image exceeds the {self.max_bytes // (1024 * 1024)}MB limit")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError):
            raise ValidationError("Uploaded file is not a valid image")
        return data

    def new_name(self, original_filename: str) -> str:
        extension = os.path.splitext(original_filename)[1].lower()
        return f"{int(time.time() * 1000)}-{next(self._counter)}{extension}"

    def path_for(self, name: str) -> Path:
        return self.root / Path(name).name

    def save(self, name: str, data: bytes) -> Path:
        target = self.path_for(name)
        target.write_bytes(data)
        logger.debug("Stored image %s (%d bytes)", target, len(data))
        return target

    def delete(self, name: Optional[str]):
        if not name:
            return
        try:
            self.path_for(name).unlink()
        except FileNotFoundError:
            return
        except OSError:
            logger.warning("Could not remove image %s", name, exc_info=True)

    def url_for(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        return f"{self.url_prefix}/{name}"
