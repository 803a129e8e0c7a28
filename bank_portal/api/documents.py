"""
Identity document endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import CreateDocumentRequest, DocumentStatusRequest, http_error
from ..documents import DocumentStatus


router = APIRouter()


@router.get("")
def list_documents(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        documents = system.documents.list(user.id)
    except Exception as e:
        raise http_error(e, "fetch documents")

    return {"documents": [d.to_dict() for d in documents]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_document(
    request: CreateDocumentRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        document = system.documents.create(
            user.id,
            document_type=request.document_type,
            document_number=request.document_number,
            country=request.country,
            issue_date=request.issue_date,
            expiry_date=request.expiry_date,
            description=request.description,
            file_name=request.file_name,
        )
    except Exception as e:
        raise http_error(e, "save document information")

    return {"document": document.to_dict(), "message": "Document information saved successfully"}


@router.put("/{document_id}/status")
def update_document_status(
    document_id: str,
    request: DocumentStatusRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        new_status = DocumentStatus(request.status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid document status: {request.status}")

    try:
        document = system.documents.update_status(user.id, document_id, new_status)
    except Exception as e:
        raise http_error(e, "update document")

    return {"document": document.to_dict()}


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        system.documents.delete(user.id, document_id)
    except Exception as e:
        raise http_error(e, "delete document")

    return {"message": "Document deleted successfully"}
