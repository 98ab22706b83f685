from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..services import document_service
from ..services.document_service import RoleView
from .dependencies import get_principal

router = APIRouter(tags=["documents"])


@router.get("/projects/{project_id}/documents", response_model=List[schemas.DocumentResponse])
def read_project_documents(
    project_id: str,
    view: RoleView = Query(RoleView.EMPLOYEE),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """List a project's documents; clients only ever get the latest of each kind."""
    return document_service.list_tour_documents(db, principal, project_id, view)


@router.post(
    "/projects/{project_id}/documents",
    response_model=schemas.DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_project_document(
    project_id: str,
    file: UploadFile = File(...),
    kind: str = Form(...),
    title: str = Form(...),
    leg_id: Optional[str] = Form(None),
    passenger_id: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    data = await file.read()
    return document_service.upload_tour_document(
        db,
        principal,
        project_id,
        kind=kind,
        title=title,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
        leg_id=leg_id,
        passenger_id=passenger_id,
    )


@router.patch("/documents/{document_id}", response_model=schemas.DocumentResponse)
def rename_document(
    document_id: str,
    payload: schemas.DocumentTitleUpdate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return document_service.update_document_title(db, principal, document_id, payload.title)


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    document_service.delete_tour_document(db, principal, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/documents/{document_id}/download-url")
def read_download_url(
    document_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Short-lived presigned URL for the document's PDF."""
    return document_service.get_download_url(db, principal, document_id)
