from extensions import db
from .base import SoftDeleteMixin


class Folder(SoftDeleteMixin, db.Model):
    __tablename__ = "folders"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    parent_id = db.Column(db.Integer, db.ForeignKey("folders.id"), nullable=True)
    path = db.Column(db.String(1000), nullable=False, default="/")  # ex: /Root/Users/alice/
    level = db.Column(db.Integer, nullable=False, default=0)
    is_system_folder = db.Column(db.Boolean, nullable=False, default=False)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Relations
    children = db.relationship("Folder", backref=db.backref("parent", remote_side=[id]), lazy=True)
    documents = db.relationship("Document", backref="folder", lazy=True)
    permissions = db.relationship("Permission", back_populates="folder", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("idx_folders_parent", "parent_id"),
        db.Index("idx_folders_owner", "owner_id"),
        db.Index("idx_folders_path", "path"),
    )

    def __repr__(self):
        return f"<Folder {self.path}>"

    @staticmethod
    def build_path(name, parent=None):
        """
        Compute the materialized path and depth of a folder named `name`
        created under `parent` (None for the root).

        Path and level are only computed at creation: folders cannot be
        moved or renamed.
        """
        if parent is None:
            return f"/{name}/", 0
        return f"{parent.path}{name}/", parent.level + 1

    @property
    def is_root(self):
        return self.parent_id is None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "parent_id": self.parent_id,
            "path": self.path,
            "level": self.level,
            "is_system_folder": self.is_system_folder,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
