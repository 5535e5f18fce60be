# services/folder_service.py

import logging
from typing import List, Optional

from extensions import db
from models import User, Role, Folder, Document, PermissionLevel, ResourceRef
from services.resource_repository import SqlAlchemyResourceRepository
from utils.access_logger import log_folder_action
from utils.performance_logger import performance_monitor

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"
ROOT_FOLDER_NAME = "Root"
USERS_FOLDER_NAME = "Users"
DEFAULT_FOLDERS = [
    ("General", "General documents"),
    ("Projects", "Project documents"),
    ("Archive", "Archived documents"),
]


class FolderError(Exception):
    """Folder operation that cannot be carried out"""
    def __init__(self, message: str, status_code: int = 400, code: str = 'FOLDER_ERROR'):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class FolderService:
    """
    Folder tree management: creation with materialized paths, the system
    folders and the per-user personal folders under /Root/Users/.
    """

    def __init__(self, repository: Optional[SqlAlchemyResourceRepository] = None):
        self.repository = repository or SqlAlchemyResourceRepository()

    def get_root(self) -> Optional[Folder]:
        return Folder.query.filter(Folder.parent_id.is_(None), Folder.is_deleted.is_(False)).first()

    def get_child(self, parent: Folder, name: str) -> Optional[Folder]:
        return Folder.query.filter_by(parent_id=parent.id, name=name, is_deleted=False).first()

    def list_children(self, parent_id: int) -> List[Folder]:
        return (Folder.query
                .filter_by(parent_id=parent_id, is_deleted=False)
                .order_by(Folder.name)
                .all())

    def create_folder(self, name, owner_id, parent=None, is_system_folder=False,
                      description=None, created_by=None) -> Folder:
        """
        Create a folder under `parent` (the root when `parent` is None).

        The session is flushed, not committed.

        Raises:
            FolderError: invalid name, second root, or a sibling with the same name
        """
        name = (name or "").strip()
        if not name or "/" in name:
            raise FolderError("Nom de dossier invalide", code='INVALID_NAME')

        if parent is None:
            if self.get_root() is not None:
                raise FolderError("Un dossier racine existe déjà", 409, 'ROOT_EXISTS')
        else:
            if parent.is_deleted:
                raise FolderError("Dossier parent introuvable", 404, 'PARENT_NOT_FOUND')
            if self.get_child(parent, name) is not None:
                raise FolderError(f"Le dossier '{name}' existe déjà", 409, 'FOLDER_EXISTS')

        path, level = Folder.build_path(name, parent)
        folder = Folder(
            name=name,
            description=description,
            parent_id=parent.id if parent is not None else None,
            path=path,
            level=level,
            is_system_folder=is_system_folder,
            owner_id=owner_id,
            created_by=created_by,
        )
        db.session.add(folder)
        db.session.flush()
        logger.info(f"Folder created: {folder.path} (owner {owner_id})")
        return folder

    def update_folder(self, folder: Folder, name, description=None, modified_by=None) -> Folder:
        """
        Rename a folder and/or change its description.

        A rename rewrites the materialized path of the folder and of every
        folder below it. The session is flushed, not committed.
        """
        if folder is None or folder.is_deleted:
            raise FolderError("Dossier introuvable", 404, 'FOLDER_NOT_FOUND')
        if folder.is_system_folder:
            raise FolderError("Les dossiers système ne peuvent pas être modifiés", code='SYSTEM_FOLDER')

        name = (name or "").strip()
        if not name or "/" in name:
            raise FolderError("Nom de dossier invalide", code='INVALID_NAME')

        if name != folder.name:
            parent = folder.parent
            if parent is not None:
                sibling = self.get_child(parent, name)
                if sibling is not None and sibling.id != folder.id:
                    raise FolderError(f"Le dossier '{name}' existe déjà", 409, 'FOLDER_EXISTS')

            old_path = folder.path
            new_path, _ = Folder.build_path(name, parent)
            descendants = (Folder.query
                           .filter(Folder.path.startswith(old_path, autoescape=True),
                                   Folder.id != folder.id)
                           .all())
            for child in descendants:
                child.path = new_path + child.path[len(old_path):]
            folder.name = name
            folder.path = new_path

        folder.description = description
        folder.touch(modified_by)
        db.session.flush()
        return folder

    def soft_delete_folder(self, folder: Folder, deleted_by=None) -> int:
        """
        Soft delete a folder, its subfolders and the documents they contain.

        Returns:
            Number of folders flagged as deleted
        """
        if folder.is_system_folder:
            raise FolderError("Les dossiers système ne peuvent pas être supprimés", code='SYSTEM_FOLDER')

        subtree = (Folder.query
                   .filter(Folder.path.startswith(folder.path, autoescape=True),
                           Folder.is_deleted.is_(False))
                   .all())
        folder_ids = [f.id for f in subtree]
        for f in subtree:
            f.soft_delete(deleted_by)
        if folder_ids:
            for document in Document.query.filter(Document.folder_id.in_(folder_ids),
                                                  Document.is_deleted.is_(False)).all():
                document.soft_delete(deleted_by)
        return len(subtree)

    # ------------------------ DOSSIERS SYSTÈME ------------------------

    def _default_owner_id(self) -> Optional[int]:
        admin = (User.query
                 .filter(User.role.in_([Role.SYSTEM_ADMIN.value, Role.ADMIN.value]),
                         User.is_deleted.is_(False))
                 .order_by(User.id)
                 .first())
        return admin.id if admin else None

    def ensure_root(self, owner_id=None) -> Folder:
        root = self.get_root()
        if root is not None:
            return root
        owner_id = owner_id or self._default_owner_id()
        if owner_id is None:
            raise FolderError("Aucun administrateur pour posséder le dossier racine", 409, 'NO_ADMIN')
        return self.create_folder(
            ROOT_FOLDER_NAME,
            owner_id,
            is_system_folder=True,
            description="Root folder for all documents",
            created_by=SYSTEM_ACTOR,
        )

    def ensure_users_folder(self, owner_id=None) -> Folder:
        root = self.ensure_root(owner_id)
        users_folder = (Folder.query
                        .filter_by(parent_id=root.id, name=USERS_FOLDER_NAME,
                                   is_system_folder=True, is_deleted=False)
                        .first())
        if users_folder is not None:
            return users_folder
        return self.create_folder(
            USERS_FOLDER_NAME,
            root.owner_id,
            parent=root,
            is_system_folder=True,
            description="Personal folders for users",
            created_by=SYSTEM_ACTOR,
        )

    def get_personal_folder(self, user: User) -> Optional[Folder]:
        users_folder = self.ensure_users_folder()
        return (Folder.query
                .filter_by(parent_id=users_folder.id, owner_id=user.id, is_deleted=False)
                .first())

    def ensure_personal_folder(self, user: Optional[User]) -> bool:
        """
        Create /Root/Users/<username>/ for `user`, owned by the user, with an
        explicit Admin grant.

        Returns:
            True when the folder was created, False when it already existed or
            the user is missing or deleted
        """
        if user is None or user.is_deleted:
            return False

        users_folder = self.ensure_users_folder()
        if self.get_personal_folder(user) is not None:
            return False

        folder = self.create_folder(
            user.username,
            user.id,
            parent=users_folder,
            description=f"Personal folder for {user.username}",
            created_by=SYSTEM_ACTOR,
        )
        self.repository.upsert_grant(user.id, ResourceRef.folder(folder.id), PermissionLevel.ADMIN, SYSTEM_ACTOR)
        log_folder_action(None, 'CREATE_PERSONAL_FOLDER', folder)
        db.session.commit()
        return True

    @performance_monitor("FolderService.ensure_personal_folders", log_threshold_ms=1000.0)
    def ensure_personal_folders(self) -> int:
        """
        Create the missing personal folders of every non-deleted user.

        A user whose folder cannot be created (invalid username, name already
        taken under /Root/Users/) is logged and skipped.
        """
        created = 0
        for user in User.query.filter(User.is_deleted.is_(False)).order_by(User.id).all():
            try:
                if self.ensure_personal_folder(user):
                    created += 1
            except FolderError as e:
                db.session.rollback()
                logger.warning(f"Personal folder skipped for user {user.id} ({user.username}): {e.message}")
        logger.info(f"Personal folder provisioning created {created} folders")
        return created

    def seed_defaults(self, admin: User) -> Folder:
        """Create the default tree (idempotent) and return the root."""
        root = self.ensure_root(admin.id)
        for name, description in DEFAULT_FOLDERS:
            if self.get_child(root, name) is None:
                self.create_folder(name, admin.id, parent=root,
                                   description=description, created_by=SYSTEM_ACTOR)
        self.ensure_users_folder()
        db.session.commit()
        self.ensure_personal_folders()
        return root
