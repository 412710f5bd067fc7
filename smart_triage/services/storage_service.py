"""Blob storage for uploaded health documents (GridFS)."""

from smart_triage.config.database import get_documents_bucket
from smart_triage.utils.errors import PersistenceError
from pymongo.errors import PyMongoError
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class DocumentStorage:
    """Stores raw document bytes under a caller-chosen path."""

    async def upload_blob(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        """
        Upload a document.

        Args:
            path: Storage key, used as the GridFS filename
            data: File contents
            content_type: Optional MIME type recorded as metadata

        Raises:
            PersistenceError: If the upload fails
        """
        try:
            bucket = await get_documents_bucket()
            await bucket.upload_from_stream(
                path, data, metadata={"content_type": content_type}
            )
        except PyMongoError as e:
            logger.error(f"Failed to upload document {path}: {e}")
            raise PersistenceError("Failed to upload document") from e

        logger.info(f"Uploaded document {path} ({len(data)} bytes)")


_document_storage: Optional[DocumentStorage] = None


def get_document_storage() -> DocumentStorage:
    """Get or create DocumentStorage instance."""
    global _document_storage
    if _document_storage is None:
        _document_storage = DocumentStorage()
    return _document_storage
