import logging
import os
import random
import shutil
import time
from functools import lru_cache
from typing import Any, BinaryIO, Optional

from fastapi import UploadFile

from app.config import settings
from app.schemas.product_schema import ProductImage

log = logging.getLogger("images")


class ImageStoreError(Exception):
    pass


class LocalImageStore:
    """
    Stores uploaded product images on local disk.
    save() returns a ProductImage whose url is the stored filename; resolve()
    turns any stored reference into something a browser can load.
    """

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        url_prefix: Optional[str] = None,
        placeholder: Optional[str] = None,
    ):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.url_prefix = url_prefix or settings.UPLOAD_URL_PREFIX
        self.placeholder = placeholder or settings.PLACEHOLDER_IMAGE

    def _unique_name(self, original_name: str) -> str:
        ext = os.path.splitext(original_name or "")[1].lower()
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    def save_stream(
        self, original_name: str, stream: BinaryIO, variant_tag: Optional[str] = None
    ) -> ProductImage:
        os.makedirs(self.upload_dir, exist_ok=True)
        filename = self._unique_name(original_name)
        path = os.path.join(self.upload_dir, filename)
        try:
            with open(path, "wb") as fh:
                shutil.copyfileobj(stream, fh)
        except OSError as e:
            raise ImageStoreError(f"Could not store {original_name}: {e}") from e
        log.info("stored image %s as %s (tag=%r)", original_name, filename, variant_tag)
        return ProductImage(url=filename, variant_tag=variant_tag or None)

    def save(self, upload: UploadFile, variant_tag: Optional[str] = None) -> ProductImage:
        return self.save_stream(upload.filename, upload.file, variant_tag)

    def resolve(self, raw: Any) -> str:
        if not raw:
            return self.placeholder
        ref = ProductImage.from_raw(raw).url
        if not ref:
            return self.placeholder
        if ref.startswith("http") or ref.startswith("data:"):
            return ref
        return self.url_prefix + ref.lstrip("/")

    def delete(self, raw: Any) -> bool:
        ref = ProductImage.from_raw(raw).url
        if not ref or ref.startswith("http") or ref.startswith("data:"):
            return False
        path = os.path.join(self.upload_dir, os.path.basename(ref))
        if os.path.exists(path):
            os.remove(path)
            log.info("deleted image %s", path)
            return True
        return False

    def health_check(self) -> bool:
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
        except OSError:
            return False
        return os.access(self.upload_dir, os.W_OK)


@lru_cache()
def get_image_store() -> LocalImageStore:
    return LocalImageStore()
