"""Import API Routes.

Endpoints for CSV upload, consolidation, document generation, push,
and document download.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from src.api.dependencies import get_manager
from src.api.models import (
    ConsolidateRequest,
    ImportResponse,
    MessageResponse,
    TradeResponse,
)
from src.imports.manager import ImportLifecycleManager
from src.imports.views import ImportView

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/imports", tags=["Imports"])

XML_MEDIA_TYPE = "application/xml"
ZIP_MEDIA_TYPE = "application/zip"


def _to_response(view: ImportView) -> ImportResponse:
    return ImportResponse.model_validate(view.to_dict())


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.post("/upload", response_model=ImportResponse, status_code=201)
def upload_csv(
    file: UploadFile = File(...),
    import_name: Optional[str] = Form(default=None),
    manager: ImportLifecycleManager = Depends(get_manager),
) -> ImportResponse:
    """Import a trades CSV (header row first)."""
    logger.info("Received CSV upload: %s", file.filename)
    view = manager.import_csv(file.file.read(), import_name=import_name)
    return _to_response(view)


@router.get("", response_model=list[ImportResponse])
def list_imports(
    status: Optional[str] = Query(default=None),
    manager: ImportLifecycleManager = Depends(get_manager),
) -> list[ImportResponse]:
    """List imports, newest first, optionally filtered by status."""
    return [_to_response(v) for v in manager.list_imports(status)]


@router.delete("/clear-all", response_model=MessageResponse)
def clear_all(manager: ImportLifecycleManager = Depends(get_manager)) -> MessageResponse:
    """Delete every import, trade and document."""
    manager.clear_all()
    return MessageResponse(message="All imports cleared")


@router.get("/documents/{document_id}/download")
def download_document(
    document_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> Response:
    document = manager.get_document(document_id)
    return Response(
        content=document.content or "",
        media_type=XML_MEDIA_TYPE,
        headers=_attachment(document.filename),
    )


@router.get("/{import_id}", response_model=ImportResponse)
def get_import(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> ImportResponse:
    return _to_response(manager.get_import(import_id))


@router.post("/{import_id}/consolidate", response_model=ImportResponse)
def consolidate_import(
    import_id: int,
    request: ConsolidateRequest,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> ImportResponse:
    """Net the original trades of an import by the requested criteria."""
    logger.info("Consolidating import %s by %s", import_id, request.criteria)
    return _to_response(manager.consolidate(import_id, request.criteria))


@router.post("/{import_id}/generate-documents", response_model=ImportResponse)
def generate_documents(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> ImportResponse:
    return _to_response(manager.generate_documents(import_id))


@router.post("/{import_id}/push", response_model=ImportResponse)
def push_import(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> ImportResponse:
    return _to_response(manager.push(import_id))


@router.get("/{import_id}/trades/original", response_model=list[TradeResponse])
def get_original_trades(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> list[TradeResponse]:
    trades = manager.get_trades(import_id, original=True)
    return [TradeResponse.model_validate(t.to_dict()) for t in trades]


@router.get("/{import_id}/trades/consolidated", response_model=list[TradeResponse])
def get_consolidated_trades(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> list[TradeResponse]:
    trades = manager.get_trades(import_id, original=False)
    return [TradeResponse.model_validate(t.to_dict()) for t in trades]


@router.delete("/{import_id}", status_code=204)
def delete_import(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> Response:
    manager.delete(import_id)
    return Response(status_code=204)


@router.get("/{import_id}/documents/download-all")
def download_all_documents(
    import_id: int,
    manager: ImportLifecycleManager = Depends(get_manager),
) -> Response:
    """ZIP archive of every document generated for the import."""
    archive = manager.archive_documents(import_id)
    return Response(
        content=archive,
        media_type=ZIP_MEDIA_TYPE,
        headers=_attachment(f"import-{import_id}-documents.zip"),
    )
