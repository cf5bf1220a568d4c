"""Trade confirmation documents: rendering and archive packing."""

from .generator import (
    DocumentGenerator,
    RenderedDocument,
    format_price,
    format_quantity,
)
from .archive import (
    ArchiveBuilder,
    archive_entry_name,
)

__all__ = [
    # Generator
    "DocumentGenerator",
    "RenderedDocument",
    "format_price",
    "format_quantity",
    # Archive
    "ArchiveBuilder",
    "archive_entry_name",
]
