from dataclasses import dataclass
from enum import Enum
from typing import Optional
from extensions import db
from .base import AuditMixin, utcnow


class PermissionLevel(Enum):
    """Access level of a grant, ordered Read < Write < Admin."""

    READ = "Read"
    WRITE = "Write"
    ADMIN = "Admin"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]

    def satisfies(self, required: "PermissionLevel") -> bool:
        return self.rank >= required.rank

    @classmethod
    def parse(cls, value) -> Optional["PermissionLevel"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        for level in cls:
            if level.value.lower() == value.strip().lower():
                return level
        return None

    @classmethod
    def descending(cls):
        return sorted(cls, key=lambda level: level.rank, reverse=True)


_LEVEL_RANKS = {
    PermissionLevel.READ: 1,
    PermissionLevel.WRITE: 2,
    PermissionLevel.ADMIN: 3,
}


class ResourceKind(Enum):
    FOLDER = "folder"
    DOCUMENT = "document"


@dataclass(frozen=True)
class ResourceRef:
    """Reference to exactly one folder or one document."""

    kind: ResourceKind
    id: int

    @classmethod
    def folder(cls, folder_id: int) -> "ResourceRef":
        return cls(ResourceKind.FOLDER, folder_id)

    @classmethod
    def document(cls, document_id: int) -> "ResourceRef":
        return cls(ResourceKind.DOCUMENT, document_id)

    @property
    def is_folder(self) -> bool:
        return self.kind is ResourceKind.FOLDER

    @property
    def folder_id(self) -> Optional[int]:
        return self.id if self.is_folder else None

    @property
    def document_id(self) -> Optional[int]:
        return None if self.is_folder else self.id

    def __str__(self):
        return f"{self.kind.value}:{self.id}"


class Permission(AuditMixin, db.Model):
    __tablename__ = "permissions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    folder_id = db.Column(db.Integer, db.ForeignKey("folders.id"), nullable=True)
    document_id = db.Column(db.Integer, db.ForeignKey("documents.id"), nullable=True)
    permission_type = db.Column(db.String(20), nullable=False, default=PermissionLevel.READ.value)
    is_inherited = db.Column(db.Boolean, nullable=False, default=False)
    granted_by = db.Column(db.String(100), nullable=False, default="")
    granted_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", backref=db.backref("permissions", lazy=True))
    folder = db.relationship("Folder", back_populates="permissions")
    document = db.relationship("Document", back_populates="permissions")

    # Une seule permission par couple (utilisateur, ressource)
    __table_args__ = (
        db.UniqueConstraint("user_id", "folder_id", name="uq_permissions_user_folder"),
        db.UniqueConstraint("user_id", "document_id", name="uq_permissions_user_document"),
        db.CheckConstraint(
            "(folder_id IS NULL) <> (document_id IS NULL)",
            name="ck_permissions_single_resource",
        ),
        db.Index("idx_permissions_user", "user_id"),
        db.Index("idx_permissions_folder", "folder_id"),
        db.Index("idx_permissions_document", "document_id"),
    )

    def __repr__(self):
        return f"<Permission {self.permission_type} user={self.user_id} on {self.resource}>"

    @property
    def level(self) -> Optional[PermissionLevel]:
        return PermissionLevel.parse(self.permission_type)

    @property
    def resource(self) -> ResourceRef:
        if self.folder_id is not None:
            return ResourceRef.folder(self.folder_id)
        return ResourceRef.document(self.document_id)

    def satisfies(self, required: PermissionLevel) -> bool:
        level = self.level
        return level is not None and level.satisfies(required)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user.username if self.user else None,
            "folder_id": self.folder_id,
            "folder_path": self.folder.path if self.folder else None,
            "document_id": self.document_id,
            "document_title": self.document.title if self.document else None,
            "permission_type": self.permission_type,
            "granted_by": self.granted_by,
            "granted_at": self.granted_at.isoformat() if self.granted_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
