"""
Identity Document Records

Metadata for a user's identity documents (passport, ID card, licence...).
File storage is out of scope; only the record is kept.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Any
from enum import Enum
import logging

from .backend import BackendClient, BackendError, NotFoundError, Query
from .cache import QueryCache

logger = logging.getLogger("bank_portal.documents")


class DocumentStatus(Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"


@dataclass
class IdentityDocument:
    id: str
    user_id: str
    document_type: str
    document_number: str
    country: str
    issue_date: str
    expiry_date: str
    status: DocumentStatus
    description: Optional[str] = None
    file_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'IdentityDocument':
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            document_type=row["document_type"],
            document_number=row["document_number"],
            country=row["country"],
            issue_date=row["issue_date"],
            expiry_date=row["expiry_date"],
            status=DocumentStatus(row.get("status") or "pending"),
            description=row.get("description"),
            file_name=row.get("file_name"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def is_expired(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return date.fromisoformat(self.expiry_date[:10]) < today

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "document_type": self.document_type,
            "document_number": self.document_number,
            "country": self.country,
            "issue_date": self.issue_date,
            "expiry_date": self.expiry_date,
            "status": self.status.value,
            "description": self.description,
            "file_name": self.file_name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class DocumentManager:
    """Cached identity document records"""

    def __init__(self, backend: BackendClient, cache: QueryCache):
        self.backend = backend
        self.cache = cache
        self.table_name = "documents"

    def list(self, user_id: str) -> List[IdentityDocument]:
        rows = self.cache.get_or_fetch(
            (self.table_name, user_id),
            lambda: self.backend.select(
                Query(self.table_name).eq("user_id", user_id).order("created_at", descending=True)
            )
        )
        return [IdentityDocument.from_row(row) for row in rows]

    def create(
        self,
        user_id: str,
        document_type: str,
        document_number: str,
        country: str,
        issue_date: date,
        expiry_date: date,
        description: Optional[str] = None,
        file_name: Optional[str] = None,
        status: DocumentStatus = DocumentStatus.PENDING
    ) -> IdentityDocument:
        if expiry_date < issue_date:
            raise ValueError("Expiry date cannot be before issue date")

        try:
            created = self.backend.insert(self.table_name, {
                "user_id": user_id,
                "document_type": document_type,
                "document_number": document_number,
                "country": country,
                "issue_date": issue_date,
                "expiry_date": expiry_date,
                "status": status.value,
                "description": description,
                "file_name": file_name,
            })
        except BackendError:
            logger.error(f"Failed to save document information for user {user_id}")
            raise

        self.cache.invalidate(self.table_name, user_id)
        return IdentityDocument.from_row(created[0])

    def update_status(self, user_id: str, document_id: str, status: DocumentStatus) -> IdentityDocument:
        updated = self.backend.update(
            Query(self.table_name).eq("id", document_id).eq("user_id", user_id),
            {"status": status.value}
        )
        if not updated:
            raise NotFoundError("Document not found")
        self.cache.invalidate(self.table_name, user_id)
        return IdentityDocument.from_row(updated[0])

    def delete(self, user_id: str, document_id: str) -> None:
        removed = self.backend.delete(
            Query(self.table_name).eq("id", document_id).eq("user_id", user_id)
        )
        if removed == 0:
            raise NotFoundError("Document not found")
        self.cache.invalidate(self.table_name, user_id)
