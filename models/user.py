from enum import Enum
from typing import Optional
from extensions import db
from werkzeug.security import generate_password_hash, check_password_hash
from .base import SoftDeleteMixin


class Role(Enum):
    SYSTEM_ADMIN = "SystemAdmin"
    ADMIN = "Admin"
    MANAGER = "Manager"
    EDITOR = "Editor"
    CONTRIBUTOR = "Contributor"
    VIEWER = "Viewer"
    USER = "User"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the Role for a stored value, or None when it is unknown."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        for role in cls:
            if role.value.lower() == str(value).strip().lower():
                return role
        return None

    @property
    def is_org_admin(self) -> bool:
        return self in ORG_ADMIN_ROLES

    @property
    def can_write_system_folders(self) -> bool:
        return self in SYSTEM_FOLDER_WRITER_ROLES


# Rôles ayant tous les droits sur l'organisation
ORG_ADMIN_ROLES = frozenset({Role.SYSTEM_ADMIN, Role.ADMIN})

# Rôles autorisés à créer des documents dans les dossiers système
SYSTEM_FOLDER_WRITER_ROLES = frozenset({
    Role.SYSTEM_ADMIN,
    Role.ADMIN,
    Role.MANAGER,
    Role.EDITOR,
    Role.CONTRIBUTOR,
})


class User(SoftDeleteMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")
    department = db.Column(db.String(100), nullable=True)
    role = db.Column(db.String(20), default=Role.VIEWER.value, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login_at = db.Column(db.DateTime, nullable=True)

    # Relations
    folders = db.relationship("Folder", backref="owner", lazy=True)
    documents = db.relationship("Document", backref="owner", lazy=True)

    def __repr__(self):
        return f"<User {self.username}>"

    @property
    def role_enum(self) -> Optional[Role]:
        return Role.parse(self.role)

    @property
    def can_authenticate(self) -> bool:
        return bool(self.is_active) and not self.is_deleted

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)
        return self.password_hash

    def check_password(self, password: str) -> bool:
        if not password:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_active": self.is_active,
        }
