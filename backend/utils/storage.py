# backend/utils/storage.py
import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

from fastapi import HTTPException, Request, UploadFile

from config import settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
URL_PREFIX = "/uploads/"


class ImageStore:
    """Local object store for product images.

    Files live in ``UPLOAD_DIR`` and are served by the app under ``/uploads``.
    Image references that are already absolute URLs (external CDN) are left
    untouched by every method.
    """

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def save(self, file: UploadFile) -> str:
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            raise HTTPException(status_code=400, detail="Invalid file type")

        ext = (file.filename or "").rsplit(".", 1)[-1].lower() if "." in (file.filename or "") else "bin"
        unique_filename = f"{uuid.uuid4()}.{ext}"
        save_path = self.ensure_root() / unique_filename
        try:
            with open(save_path, "wb") as buffer:
                shutil.copyfileobj(file.file, buffer)
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"File save error: {e}")
        finally:
            file.file.close()
        return f"{URL_PREFIX}{unique_filename}"

    def delete(self, path: Optional[str]) -> bool:
        if not path or not path.startswith(URL_PREFIX):
            return False
        target = self.root / Path(path[len(URL_PREFIX):]).name
        if target.exists():
            target.unlink()
            return True
        logger.warning("Image %s not found in %s", path, self.root)
        return False

    def url_for(self, request: Request, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(str(request.base_url), path.lstrip("/"))


image_store = ImageStore()
