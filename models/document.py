from extensions import db
from .base import SoftDeleteMixin


class Document(SoftDeleteMixin, db.Model):
    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    folder_id = db.Column(db.Integer, db.ForeignKey("folders.id"), nullable=False)
    file_name = db.Column(db.String(255), nullable=False, default="")
    file_size = db.Column(db.BigInteger, nullable=False, default=0)
    mime_type = db.Column(db.String(255), nullable=False, default="application/octet-stream")
    file_extension = db.Column(db.String(20), nullable=False, default="")
    current_version = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(30), nullable=False, default="Active")
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Relations
    versions = db.relationship(
        "DocumentVersion",
        backref="document",
        lazy=True,
        order_by="DocumentVersion.version_number",
    )
    permissions = db.relationship("Permission", back_populates="document", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("idx_documents_folder", "folder_id"),
        db.Index("idx_documents_owner", "owner_id"),
        db.Index("idx_documents_status", "status"),
    )

    def __repr__(self):
        return f"<Document {self.title} v{self.current_version}>"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "folder_id": self.folder_id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "file_extension": self.file_extension,
            "current_version": self.current_version,
            "status": self.status,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
