import logging
import re
import secrets
import time
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from app.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class LocalStorage:
    """
    Product images on local disk.

    Files are stored flat under ``upload_dir`` and referenced by their
    public path ``<url_prefix>/<filename>``, which is what the static file
    mount serves.
    """

    def __init__(self, upload_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

    @staticmethod
    def make_filename(original_filename: Optional[str]) -> str:
        """Timestamped unique name that keeps a sanitized copy of the original"""
        base = Path(original_filename or "image").name
        safe = _UNSAFE_CHARS.sub("_", base).strip("._") or "image"
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{safe}"

    async def save_image(self, file: UploadFile) -> str:
        """Save an uploaded image and return its public path"""
        filename = self.make_filename(file.filename)
        file_path = self.upload_dir / filename

        content = await file.read()
        with open(file_path, "wb") as f:
            f.write(content)

        logger.info(f"Saved image {filename} ({len(content)} bytes)")
        return f"{self.url_prefix}/{filename}"

    def is_local(self, public_path: Optional[str]) -> bool:
        """True when the path points into the upload area"""
        return bool(public_path) and public_path.startswith(self.url_prefix + "/")

    def get_file_path(self, public_path: str) -> Optional[Path]:
        """Resolve a public path to a file under upload_dir, or None"""
        if not self.is_local(public_path):
            return None
        filename = public_path[len(self.url_prefix) + 1:]
        # Refuse anything that could escape the upload directory
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None
        return self.upload_dir / filename

    def delete_image(self, public_path: str) -> bool:
        """
        Delete a locally stored image.

        Returns False when the path is not local or the file is already
        gone. Other OS errors propagate to the caller.
        """
        file_path = self.get_file_path(public_path)
        if file_path is None or not file_path.exists():
            return False
        file_path.unlink()
        return True

    def image_exists(self, public_path: str) -> bool:
        file_path = self.get_file_path(public_path)
        return file_path is not None and file_path.exists()


storage = LocalStorage()
