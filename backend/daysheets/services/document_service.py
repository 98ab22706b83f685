"""Tour document registry atop object storage.

Metadata rows are the source of truth for whether a document exists; storage
objects are written before and removed after their row.
"""

import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.policies import Principal, authorize, require_artist_access
from ..crud import crud_document, crud_project
from ..models import DocumentKind, NotificationType, TourDocument
from ..utils import storage
from ..utils.errors import NotFoundError, PersistenceError, ValidationError
from ..utils.ids import ensure_uuid
from . import notification_service

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
MAX_TITLE_LENGTH = 255


class RoleView(str, Enum):
    EMPLOYEE = "employee"
    CLIENT = "client"


def latest_per_kind(documents: List[TourDocument]) -> List[TourDocument]:
    """Keep the first row of each kind from a newest-first list."""
    seen = set()
    latest = []
    for doc in documents:
        if doc.kind in seen:
            continue
        seen.add(doc.kind)
        latest.append(doc)
    return latest


def _validate_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title or len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Title must be between 1 and {MAX_TITLE_LENGTH} characters", {"title": "invalid length"}
        )
    return title


def _project_for(db: Session, principal: Principal, project_id: str):
    project = crud_project.get_project(db, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    require_artist_access(principal, project.artist_id)
    return project


def list_tour_documents(
    db: Session,
    principal: Optional[Principal],
    project_id: str,
    role_view: RoleView = RoleView.EMPLOYEE,
) -> List[TourDocument]:
    principal = authorize(principal, "documents.view")
    project_id = ensure_uuid(project_id, "project_id")
    _project_for(db, principal, project_id)
    if not principal.is_staff:
        role_view = RoleView.CLIENT
    documents = crud_document.list_documents(db, project_id)
    if role_view == RoleView.CLIENT:
        return latest_per_kind(documents)
    return documents


def upload_tour_document(
    db: Session,
    principal: Optional[Principal],
    project_id: str,
    *,
    kind: str,
    title: str,
    filename: Optional[str],
    content_type: Optional[str],
    data: bytes,
    leg_id: Optional[str] = None,
    passenger_id: Optional[str] = None,
) -> TourDocument:
    principal = authorize(principal, "documents.manage")
    project_id = ensure_uuid(project_id, "project_id")
    if leg_id:
        leg_id = ensure_uuid(leg_id, "leg_id")
    if passenger_id:
        passenger_id = ensure_uuid(passenger_id, "passenger_id")
    try:
        kind = DocumentKind(kind)
    except ValueError:
        raise ValidationError("Invalid document kind", {"kind": "unknown"})
    title = _validate_title(title)
    if (content_type or "").lower() != PDF_CONTENT_TYPE:
        raise ValidationError("Only PDF files are allowed", {"file": "must be a PDF"})
    if not data:
        raise ValidationError("File is empty", {"file": "empty"})
    if len(data) > settings.MAX_DOCUMENT_BYTES:
        raise ValidationError("File size must be less than 10MB", {"file": "too large"})
    project = _project_for(db, principal, project_id)

    key = storage.build_document_key(project_id)
    try:
        storage.upload_object(key, data, PDF_CONTENT_TYPE)
    except storage.StorageError as exc:
        raise PersistenceError(str(exc)) from exc

    try:
        doc = crud_document.create_document(
            db,
            project_id=project_id,
            leg_id=leg_id,
            passenger_id=passenger_id,
            kind=kind,
            title=title,
            file_path=key,
            uploaded_by=principal.user_id,
        )
        notification_service.emit_notification(
            db,
            type=NotificationType.DOCUMENT_UPLOADED,
            artist_id=project.artist_id,
            project_id=project_id,
            leg_id=leg_id,
            actor_user_id=principal.user_id,
            title="New document available",
            body=title,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Document metadata insert failed for %s: %s", key, exc, exc_info=True)
        try:
            storage.delete_object(key)
        except storage.StorageError as cleanup_exc:
            logger.warning("Orphaned storage object %s: %s", key, cleanup_exc)
        raise PersistenceError(str(exc)) from exc
    logger.info("Uploaded %s document %s from %r for project %s", kind.value, doc.id, filename, project_id)
    return doc


def _get_document(db: Session, document_id: str) -> TourDocument:
    document_id = ensure_uuid(document_id, "document_id")
    doc = crud_document.get_document(db, document_id)
    if doc is None:
        raise NotFoundError("Document not found")
    return doc


def delete_tour_document(db: Session, principal: Optional[Principal], document_id: str) -> None:
    principal = authorize(principal, "documents.manage")
    doc = _get_document(db, document_id)
    file_path = doc.file_path
    try:
        crud_document.delete_document(db, doc)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    try:
        storage.delete_object(file_path)
    except storage.StorageError as exc:
        logger.warning("Document %s deleted but storage cleanup failed: %s", document_id, exc)


def update_document_title(
    db: Session, principal: Optional[Principal], document_id: str, title: str
) -> TourDocument:
    principal = authorize(principal, "documents.manage")
    title = _validate_title(title)
    doc = _get_document(db, document_id)
    doc.title = title
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(doc)
    return doc


def create_signed_download_url(file_path: str) -> str:
    try:
        return storage.presign_get(file_path, settings.SIGNED_URL_TTL)
    except storage.StorageError as exc:
        raise PersistenceError(str(exc)) from exc


def get_download_url(db: Session, principal: Optional[Principal], document_id: str) -> dict:
    principal = authorize(principal, "documents.view")
    doc = _get_document(db, document_id)
    require_artist_access(principal, doc.project.artist_id)
    return {"url": create_signed_download_url(doc.file_path), "expiresIn": settings.SIGNED_URL_TTL}
