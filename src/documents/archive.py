"""Bundle generated documents into a single ZIP archive."""

import io
import logging
import zipfile
from typing import Any, Iterable

from src.api_errors.exceptions import AggregationError

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".xml"
PLACEHOLDER_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<Error>Content not available for document ID {document_id}</Error>"
)


def archive_entry_name(document_id: Any, filename: str) -> str:
    """Entry name made unique by suffixing the document ID.

    ``trade_X_T1.xml`` with id 7 becomes ``trade_X_T1_7.xml``; a blank
    filename becomes ``document_7.xml``.
    """
    if not filename or not filename.strip():
        return f"document_{document_id}{ARCHIVE_EXTENSION}"
    base = filename
    if base.endswith(ARCHIVE_EXTENSION):
        base = base[: -len(ARCHIVE_EXTENSION)]
    return f"{base}_{document_id}{ARCHIVE_EXTENSION}"


class ArchiveBuilder:
    """Packs documents (objects with ``id``, ``filename``, ``content``) into a ZIP."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def pack(self, documents: Iterable[Any]) -> bytes:
        """Build the archive in memory.

        Raises:
            AggregationError: If any entry cannot be written.
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, mode="w", compression=self.compression) as archive:
                for document in documents:
                    name = archive_entry_name(document.id, document.filename)
                    content = document.content
                    if content is None or not content.strip():
                        logger.warning(
                            "Document %s (%s) has no content, packing placeholder",
                            document.id,
                            name,
                        )
                        content = PLACEHOLDER_TEMPLATE.format(document_id=document.id)
                    archive.writestr(name, content.encode("utf-8"))
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            logger.error("Failed to build document archive: %s", exc)
            raise AggregationError(f"Failed to build document archive: {exc}") from exc
        return buffer.getvalue()
