"""
Local image store for memory photos.

Images are copied to <images_dir>/<owner_id>/<epoch_millis>.<ext> and
referred to by that relative path. Memory records only ever carry the
reference string.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import Optional

from memorybender.config import MAX_IMAGE_BYTES, get_images_dir


logger = logging.getLogger(__name__)


class ImageTooLargeError(ValueError):
    """Raised when an image exceeds the upload size limit."""


class ImageStore:
    """Stores photo files and hands back opaque references."""

    def __init__(self, images_dir: Optional[Path] = None, max_bytes: int = MAX_IMAGE_BYTES):
        self.images_dir = Path(images_dir) if images_dir else get_images_dir()
        self.images_dir.mkdir(parents=True, exist_ok=True)
        self.max_bytes = max_bytes

    def save(self, owner_id: str, source_path) -> str:
        """
        Copy an image into the store.

        Args:
            owner_id: Owning user (used as the folder name)
            source_path: Image file to copy

        Returns:
            Image reference, e.g. "me/1700000000000.jpg"

        Raises:
            FileNotFoundError: if the source does not exist
            ImageTooLargeError: if the file is over the size limit
            ValueError: if owner_id is not a single folder name
        """
        source = Path(source_path)
        if not source.is_file():
            raise FileNotFoundError(f"Image not found: {source}")

        size = source.stat().st_size
        if size > self.max_bytes:
            raise ImageTooLargeError(
                f"Image is {size / (1024 * 1024):.1f}MB, "
                f"limit is {self.max_bytes / (1024 * 1024):.0f}MB"
            )

        root = self.images_dir.resolve()
        owner_dir = (root / owner_id).resolve()
        if not owner_id or owner_dir.parent != root:
            raise ValueError(f"Invalid owner id for image storage: {owner_id!r}")
        owner_dir.mkdir(parents=True, exist_ok=True)

        suffix = source.suffix.lower() or ".img"
        stamp = int(time.time() * 1000)
        target = owner_dir / f"{stamp}{suffix}"
        while target.exists():
            stamp += 1
            target = owner_dir / f"{stamp}{suffix}"

        shutil.copyfile(source, target)
        image_ref = f"{owner_id}/{target.name}"
        logger.info(f"Stored image {image_ref} ({size} bytes)")
        return image_ref

    def resolve(self, image_ref: str) -> Path:
        """
        Path of a stored image.

        Raises:
            ValueError: if the reference points outside the store
        """
        root = self.images_dir.resolve()
        path = (root / image_ref).resolve()
        if root not in path.parents:
            raise ValueError(f"Invalid image reference: {image_ref!r}")
        return path

    def delete(self, image_ref: str) -> bool:
        """Remove a stored image. Returns False if it was already gone."""
        path = self.resolve(image_ref)
        if not path.exists():
            logger.warning(f"Image {image_ref} not found for deletion")
            return False
        path.unlink()
        logger.info(f"Deleted image {image_ref}")
        return True
