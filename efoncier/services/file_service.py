"""
e-Foncier Backend: Document Storage Service
============================================

What:  Validates, stores, resolves and removes parcel attachments on disk.
How:   Checks extension, size and sniffed MIME type, then writes the bytes
       under a UUID filename inside the parcel's own directory.
Who:   Called by DocumentService for uploads and by the download route.

Validation layers:
    1. Extension allow-list (cheap, no content read)
    2. Size limit (Content-Length when given, then the actual byte count)
    3. Content sniffing with libmagic (python-magic); the detected type must
       be allowed AND agree with the extension
    4. UUID filename: no user input reaches the file system path

Directory Structure:
    storage/
    └── parcels/
        └── 3f2c9a7e-.../
            ├── 8b1d...e4.pdf
            └── c07a...91.jpg
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from efoncier.config import settings
from efoncier.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Allowed MIME types and the extensions each one may carry.
ALLOWED_MIME_TYPES = {
    "application/pdf": {".pdf"},
    "image/png": {".png"},
    "image/jpeg": {".jpg", ".jpeg"},
}

ALLOWED_EXTENSIONS = {".pdf", ".png", ".jpg", ".jpeg"}


class FileService:
    """
    Manages the lifecycle of stored parcel documents.

    Lifecycle of an uploaded document:
        1. DocumentService passes the filename and bytes to validate_and_store()
        2. Extension, size and MIME checks run in that order
        3. Bytes are written to parcels/<parcel_id>/<uuid><ext>
        4. The storage-relative path is persisted on the Document row
        5. If the surrounding request fails, cleanup_file() removes the file
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the configured storage path (tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns the lowercase extension (with dot).

        Raises:
            ValidationError if the extension is not in the allow-list.
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="files",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects empty files and files above MAX_FILE_SIZE.

        The reported Content-Length is checked first; the actual byte count
        is checked regardless because clients can misreport it.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="files")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="files",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="files",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def detect_mime_type(self, content: bytes) -> str:
        """Sniffs the MIME type from the leading bytes using libmagic."""
        import magic

        return magic.from_buffer(content[:4096], mime=True)

    def validate_mime_type(self, content: bytes, extension: str) -> str:
        """
        Checks the sniffed MIME type against the allow-list and the extension.

        Returns:
            The detected MIME type (stored on the Document row).

        Raises:
            ValidationError when the type is not allowed or contradicts the
            extension (a PDF renamed to .png, for instance).
            FileStorageError when detection itself fails.
        """
        try:
            mime_type = self.detect_mime_type(content)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        allowed_exts = ALLOWED_MIME_TYPES.get(mime_type)
        if allowed_exts is None:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    "Documents must be PDF, PNG or JPEG files."
                ),
                field="files",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        if extension not in allowed_exts:
            raise ValidationError(
                message=f"File extension '{extension}' does not match its content ({mime_type}).",
                field="files",
                context={"detected_mime": mime_type, "extension": extension},
            )
        return mime_type

    def _generate_storage_path(self, subdir: str, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new UUID filename."""
        relative_path = f"{subdir.strip('/')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, subdir: str, extension: str) -> Tuple[str, str]:
        """
        Writes validated bytes to disk.

        Returns:
            Tuple of (absolute_path, relative_path).

        Raises:
            FileStorageError if the directory or the file cannot be written.
        """
        absolute_path, relative_path = self._generate_storage_path(subdir, extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded document. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    def resolve(self, relative_path: str) -> Path:
        """
        Maps a storage-relative path back to an existing file.

        Raises:
            ValidationError if the path escapes the storage root.
            NotFoundError if the file is gone.
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path

    async def cleanup_file(self, file_path: str) -> None:
        """
        Removes a file if it exists (best-effort).

        Used to undo writes of a failed upload request; a failure here is
        logged, never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        subdir: str,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str, str]:
        """
        Complete validation and storage pipeline.

        Returns:
            Tuple of (absolute_path, relative_path_for_db, mime_type).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content, ext)
        absolute_path, relative_path = await self.store_file(content, subdir, ext)
        return absolute_path, relative_path, mime_type


file_service = FileService()
