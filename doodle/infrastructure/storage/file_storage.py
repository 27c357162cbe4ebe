import logging
import os
import time
from typing import Dict

logger = logging.getLogger(__name__)

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(SIZE_UNITS) - 1:
        exponent += 1
    value = round(size / 1024 ** exponent, 2)
    return f"{value:g} {SIZE_UNITS[exponent]}"


class FileStorageService:
    """
    Stores uploaded course material on the local filesystem.

    Blobs live flat under ``root_dir`` and are addressed by blob name; the
    public URL is ``<base_url>/uploads/<blob_name>``.
    """

    CONTAINER = "course-materials"

    def __init__(self, root_dir: str, base_url: str):
        self._root = os.path.abspath(root_dir)
        self._base_url = base_url.rstrip("/")
        os.makedirs(self._root, exist_ok=True)

    @property
    def root_dir(self) -> str:
        return self._root

    def upload(self, content: bytes, original_name: str) -> Dict:
        safe_name = self._safe_name(original_name)
        blob_name = f"{int(time.time() * 1000)}-{safe_name}"
        with open(self.path(blob_name), "wb") as fh:
            fh.write(content)
        logger.info(f"Stored {len(content)} bytes as blob {blob_name}")
        return {
            "url": self.url_for(blob_name),
            "blob_name": blob_name,
            "container": self.CONTAINER,
        }

    def read(self, blob_name: str) -> bytes:
        with open(self.path(blob_name), "rb") as fh:
            return fh.read()

    def delete(self, blob_name: str) -> bool:
        target = self.path(blob_name)
        if not os.path.exists(target):
            logger.warning(f"Blob {blob_name} not found on delete")
            return False
        os.remove(target)
        logger.info(f"Deleted blob {blob_name}")
        return True

    def size(self, blob_name: str) -> int:
        target = self.path(blob_name)
        if not os.path.exists(target):
            return 0
        return os.path.getsize(target)

    def exists(self, blob_name: str) -> bool:
        return os.path.exists(self.path(blob_name))

    def path(self, blob_name: str) -> str:
        return os.path.join(self._root, self._safe_name(blob_name))

    def url_for(self, blob_name: str) -> str:
        return f"{self._base_url}/uploads/{blob_name}"

    @staticmethod
    def blob_name_from_url(url: str) -> str:
        return url.rstrip("/").split("/")[-1]

    @staticmethod
    def _safe_name(name: str) -> str:
        base = os.path.basename(name.replace("\\", "/"))
        if not base or base in (".", ".."):
            raise ValueError(f"Invalid file name: {name!r}")
        return base
