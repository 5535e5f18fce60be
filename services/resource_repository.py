# services/resource_repository.py

import logging
from datetime import datetime
from typing import List, Optional, Protocol, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import User, Folder, Document, Permission, PermissionLevel, ResourceRef
from models.base import utcnow

logger = logging.getLogger(__name__)


class ResourceRepository(Protocol):
    """Lookups the permission resolver and grant service depend on."""

    def get_user(self, user_id: int) -> Optional[User]: ...

    def get_folder(self, folder_id: int) -> Optional[Folder]: ...

    def get_document(self, document_id: int) -> Optional[Document]: ...

    def find_grant(self, user_id: int, ref: ResourceRef,
                   include_expired: bool = False) -> Optional[Permission]: ...

    def get_grant(self, permission_id: int) -> Optional[Permission]: ...

    def upsert_grant(self, user_id: int, ref: ResourceRef, level: PermissionLevel,
                     granted_by: str, expires_at: Optional[datetime] = None) -> Tuple[Permission, bool]: ...

    def delete_grant(self, grant: Permission) -> None: ...

    def list_grants_for_user(self, user_id: int) -> List[Permission]: ...

    def list_grants_for_folder(self, folder_id: int) -> List[Permission]: ...

    def list_grants_for_document(self, document_id: int) -> List[Permission]: ...

    def commit(self) -> None: ...


class SqlAlchemyResourceRepository:
    """
    ResourceRepository backed by the Flask-SQLAlchemy session.

    Soft-deleted users, folders and documents are reported as missing.
    Database errors are not caught here: they propagate to the caller.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    # ------------------------ RESSOURCES ------------------------

    def _get_live(self, model, entity_id):
        if entity_id is None:
            return None
        entity = self.session.get(model, entity_id)
        if entity is None or entity.is_deleted:
            return None
        return entity

    def get_user(self, user_id):
        return self._get_live(User, user_id)

    def get_folder(self, folder_id):
        return self._get_live(Folder, folder_id)

    def get_document(self, document_id):
        return self._get_live(Document, document_id)

    # ------------------------ PERMISSIONS ------------------------

    def _grant_query(self, user_id, ref):
        query = self.session.query(Permission).filter(Permission.user_id == user_id)
        if ref.is_folder:
            return query.filter(Permission.folder_id == ref.id)
        return query.filter(Permission.document_id == ref.id)

    def find_grant(self, user_id, ref, include_expired=False):
        if user_id is None:
            return None
        query = self._grant_query(user_id, ref)
        if not include_expired:
            query = query.filter(or_(Permission.expires_at.is_(None), Permission.expires_at > utcnow()))
        return query.first()

    def get_grant(self, permission_id):
        if permission_id is None:
            return None
        return self.session.get(Permission, permission_id)

    def upsert_grant(self, user_id, ref, level, granted_by, expires_at=None):
        """
        Create or update the grant of `user_id` on `ref`.

        The unique constraints on (user_id, folder_id) and (user_id, document_id)
        arbitrate concurrent inserts: the loser's savepoint is rolled back and
        the row that won is updated instead.

        Returns:
            (Permission, created)
        """
        grant = self.find_grant(user_id, ref, include_expired=True)
        if grant is None:
            now = utcnow()
            grant = Permission(
                user_id=user_id,
                folder_id=ref.folder_id,
                document_id=ref.document_id,
                permission_type=level.value,
                is_inherited=False,
                granted_by=granted_by,
                granted_at=now,
                expires_at=expires_at,
                created_at=now,
                created_by=granted_by,
            )
            try:
                with self.session.begin_nested():
                    self.session.add(grant)
                return grant, True
            except IntegrityError:
                logger.info(f"Concurrent grant detected for user {user_id} on {ref}, updating existing row")
                grant = self.find_grant(user_id, ref, include_expired=True)
                if grant is None:
                    raise

        grant.permission_type = level.value
        grant.expires_at = expires_at
        grant.touch(granted_by)
        return grant, False

    def delete_grant(self, grant):
        self.session.delete(grant)

    def list_grants_for_user(self, user_id):
        return (self.session.query(Permission)
                .filter(Permission.user_id == user_id)
                .order_by(Permission.id)
                .all())

    def list_grants_for_folder(self, folder_id):
        return (self.session.query(Permission)
                .filter(Permission.folder_id == folder_id)
                .order_by(Permission.id)
                .all())

    def list_grants_for_document(self, document_id):
        return (self.session.query(Permission)
                .filter(Permission.document_id == document_id)
                .order_by(Permission.id)
                .all())

    def commit(self):
        self.session.commit()
