from typing import List, Optional

from sqlalchemy.orm import Session

from .. import models


def list_documents(db: Session, project_id: str) -> List[models.TourDocument]:
    """All versions, newest first."""
    return (
        db.query(models.TourDocument)
        .filter(models.TourDocument.project_id == project_id)
        .order_by(models.TourDocument.uploaded_at.desc(), models.TourDocument.created_at.desc())
        .all()
    )


def get_document(db: Session, document_id: str) -> Optional[models.TourDocument]:
    return db.query(models.TourDocument).filter(models.TourDocument.id == document_id).first()


def create_document(db: Session, **fields) -> models.TourDocument:
    # Only the newest upload per (project, kind) is current
    (
        db.query(models.TourDocument)
        .filter(
            models.TourDocument.project_id == fields["project_id"],
            models.TourDocument.kind == fields["kind"],
            models.TourDocument.is_current.is_(True),
        )
        .update({models.TourDocument.is_current: False}, synchronize_session="fetch")
    )
    doc = models.TourDocument(is_current=True, **fields)
    db.add(doc)
    db.flush()
    return doc


def delete_document(db: Session, doc: models.TourDocument) -> None:
    was_current = doc.is_current
    project_id, kind = doc.project_id, doc.kind
    db.delete(doc)
    db.flush()
    if was_current:
        successor = (
            db.query(models.TourDocument)
            .filter(models.TourDocument.project_id == project_id, models.TourDocument.kind == kind)
            .order_by(models.TourDocument.uploaded_at.desc())
            .first()
        )
        if successor is not None:
            successor.is_current = True
            db.flush()
