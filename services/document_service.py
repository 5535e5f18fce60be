# services/document_service.py

import os
import logging
from typing import List

from sqlalchemy import or_

from extensions import db
from models import Document, DocumentVersion

logger = logging.getLogger(__name__)

DOCUMENT_STATUSES = ("Active", "Draft", "UnderReview", "Approved", "Published", "Archived")


class DocumentError(Exception):
    """Document operation that cannot be carried out"""
    def __init__(self, message: str, status_code: int = 400, code: str = 'DOCUMENT_ERROR'):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class DocumentService:
    """Document records and their append-only version history (no file I/O)."""

    def create_document(self, folder, owner_id, title, file_name, file_size=0,
                        mime_type="application/octet-stream", description=None,
                        file_path=None, created_by=None) -> Document:
        title = (title or "").strip()
        if not title:
            raise DocumentError("Le titre est requis", code='TITLE_REQUIRED')
        if folder is None or folder.is_deleted:
            raise DocumentError("Dossier introuvable", 404, 'FOLDER_NOT_FOUND')

        document = Document(
            title=title,
            description=description,
            folder_id=folder.id,
            file_name=file_name or title,
            file_size=file_size or 0,
            mime_type=mime_type,
            file_extension=os.path.splitext(file_name or "")[1].lower(),
            current_version=1,
            owner_id=owner_id,
            created_by=created_by,
        )
        db.session.add(document)
        db.session.flush()

        db.session.add(DocumentVersion(
            document_id=document.id,
            version_number=1,
            file_path=file_path or f"{folder.path}{document.file_name}",
            file_size=document.file_size,
            mime_type=mime_type,
            version_comment="Initial version",
            is_current_version=True,
            created_by=created_by,
        ))
        db.session.flush()
        return document

    def add_version(self, document, file_path, file_size=0,
                    mime_type="application/octet-stream", comment=None,
                    created_by=None) -> DocumentVersion:
        """
        Append a new version and make it current.

        Existing versions are never modified except for the current flag.
        """
        if document is None or document.is_deleted:
            raise DocumentError("Document introuvable", 404, 'DOCUMENT_NOT_FOUND')
        if not file_path:
            raise DocumentError("Le chemin du fichier est requis", code='FILE_PATH_REQUIRED')

        (DocumentVersion.query
         .filter_by(document_id=document.id, is_current_version=True)
         .update({"is_current_version": False}, synchronize_session="fetch"))

        version = DocumentVersion(
            document_id=document.id,
            version_number=document.current_version + 1,
            file_path=file_path,
            file_size=file_size or 0,
            mime_type=mime_type,
            version_comment=comment,
            is_current_version=True,
            created_by=created_by,
        )
        db.session.add(version)

        document.current_version = version.version_number
        document.file_size = version.file_size
        document.mime_type = mime_type
        document.touch(created_by)
        db.session.flush()

        logger.info(f"Document {document.id} now at version {document.current_version}")
        return version

    def update_document(self, document, title=None, description=None, status=None,
                        modified_by=None) -> Document:
        """Update title, description and, when given, status. Flushed, not committed."""
        if document is None or document.is_deleted:
            raise DocumentError("Document introuvable", 404, 'DOCUMENT_NOT_FOUND')

        title = (title or "").strip()
        if not title:
            raise DocumentError("Le titre est requis", code='TITLE_REQUIRED')
        if status is not None and status not in DOCUMENT_STATUSES:
            raise DocumentError(f"Statut invalide: {status}", code='INVALID_STATUS')

        document.title = title
        document.description = description
        if status is not None:
            document.status = status
        document.touch(modified_by)
        db.session.flush()
        return document

    def list_documents(self, folder_id=None, search=None) -> List[Document]:
        """Live documents, newest first, optionally limited to one folder and a title/description search."""
        query = Document.query.filter(Document.is_deleted.is_(False))
        if folder_id is not None:
            query = query.filter(Document.folder_id == folder_id)
        search = (search or "").strip()
        if search:
            query = query.filter(or_(Document.title.contains(search, autoescape=True),
                                     Document.description.contains(search, autoescape=True)))
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    def list_versions(self, document) -> List[DocumentVersion]:
        return (DocumentVersion.query
                .filter_by(document_id=document.id)
                .order_by(DocumentVersion.version_number.desc())
                .all())

    def soft_delete_document(self, document, deleted_by=None):
        if document is None or document.is_deleted:
            raise DocumentError("Document introuvable", 404, 'DOCUMENT_NOT_FOUND')
        document.soft_delete(deleted_by)
