from datetime import datetime, timezone
from extensions import db


def utcnow():
    """Current UTC time as a naive datetime, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AuditMixin:
    """Colonnes d'audit communes (création / modification)."""

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    created_by = db.Column(db.String(100), nullable=True)
    modified_at = db.Column(db.DateTime, nullable=True)
    modified_by = db.Column(db.String(100), nullable=True)

    def touch(self, modified_by=None):
        self.modified_at = utcnow()
        self.modified_by = modified_by


class SoftDeleteMixin(AuditMixin):
    """Rows are never physically removed, only flagged."""

    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(db.String(100), nullable=True)

    def soft_delete(self, deleted_by=None):
        self.is_deleted = True
        self.deleted_at = utcnow()
        self.deleted_by = deleted_by
