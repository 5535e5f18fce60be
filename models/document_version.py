from extensions import db
from .base import utcnow


class DocumentVersion(db.Model):
    __tablename__ = "document_versions"

    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey("documents.id"), nullable=False)
    version_number = db.Column(db.Integer, nullable=False)
    file_path = db.Column(db.String(1000), nullable=False, default="")
    file_size = db.Column(db.BigInteger, nullable=False, default=0)
    mime_type = db.Column(db.String(255), nullable=False, default="application/octet-stream")
    version_comment = db.Column(db.Text, nullable=True)
    is_current_version = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    created_by = db.Column(db.String(100), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("document_id", "version_number", name="uq_document_versions_number"),
        db.Index("idx_document_versions_document", "document_id"),
    )

    def __repr__(self):
        return f"<DocumentVersion doc={self.document_id} v{self.version_number}>"

    def to_dict(self):
        return {
            "id": self.id,
            "document_id": self.document_id,
            "version_number": self.version_number,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "version_comment": self.version_comment,
            "is_current_version": self.is_current_version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "created_by": self.created_by,
        }
