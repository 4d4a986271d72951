"""Inline image decoding and storage of decoded images."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import TYPE_CHECKING
from uuid import uuid4

from book_catalog.exceptions import (
    ImageTooLargeError,
    MalformedImageError,
    StorageError,
    StorageFileNotFoundError,
    UnsupportedImageTypeError,
)
from book_catalog.types import DecodedImage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from book_catalog.storage.base import Storage
    from book_catalog.types import StoredFile

__all__ = (
    "ALLOWED_IMAGE_TYPES",
    "MAX_IMAGE_SIZE",
    "ImageStore",
    "decode_data_uri",
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"jpeg", "jpg", "png"})
MAX_IMAGE_SIZE = 2 * 1024 * 1024

_DATA_URI_RE = re.compile(r"data:image/(\w+);base64,(.*)", re.DOTALL)


def decode_data_uri(value: str, *, max_size: int = MAX_IMAGE_SIZE) -> DecodedImage:
    """Decode a ``data:image/<type>;base64,<payload>`` string.

    Args:
        value: The data URI
        max_size: Largest accepted decoded size in bytes

    Returns:
        The decoded bytes and the lower-cased extension

    Raises:
        MalformedImageError: If value is not a data URI or the payload is not valid base64
        UnsupportedImageTypeError: If the declared type is not jpeg, jpg or png
        ImageTooLargeError: If the decoded payload is larger than max_size
    """
    match = _DATA_URI_RE.fullmatch(value)
    if match is None:
        raise MalformedImageError("Invalid base64 image data")

    image_type = match.group(1).lower()
    if image_type not in ALLOWED_IMAGE_TYPES:
        raise UnsupportedImageTypeError(image_type)

    try:
        data = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedImageError("Invalid base64 image data") from e

    if not data:
        raise MalformedImageError("Image payload is empty")

    if len(data) > max_size:
        raise ImageTooLargeError(len(data), max_size)

    return DecodedImage(data=data, extension=image_type)


class ImageStore:
    """Names, writes and removes decoded images in a storage backend."""

    def __init__(self, storage: Storage, *, max_size: int = MAX_IMAGE_SIZE) -> None:
        self.storage = storage
        self.max_size = max_size

    def decode(self, value: str) -> DecodedImage:
        return decode_data_uri(value, max_size=self.max_size)

    @staticmethod
    def generate_filename(extension: str) -> str:
        """Random, collision-resistant filename keeping the validated extension."""
        return f"{uuid4().hex}.{extension}"

    async def save(self, image: DecodedImage) -> str:
        """Write image under a fresh filename.

        Returns:
            The filename to record on the entity
        """
        filename = self.generate_filename(image.extension)
        await self.storage.put(filename, image.data, content_type=image.content_type)
        logger.debug("Stored image %s (%d bytes)", filename, image.size)
        return filename

    async def remove(self, filename: str) -> None:
        """Delete a stored image.

        Called once the database outcome is settled, so storage failures are
        logged and never raised.
        """
        try:
            await self.storage.delete(filename)
        except StorageFileNotFoundError:
            logger.warning("Image %s was already missing from storage", filename)
        except StorageError as e:
            logger.warning("Failed to delete image %s: %s", filename, e)

    async def open(self, filename: str) -> tuple[StoredFile, AsyncIterator[bytes]]:
        """Metadata and content stream of a stored image.

        Raises:
            StorageFileNotFoundError: If the file is missing
        """
        info = await self.storage.info(filename)
        return info, self.storage.get(filename)
