# services/permission_resolver.py

from typing import Optional

from models import PermissionLevel, ResourceRef, Role
from services.resource_repository import ResourceRepository, SqlAlchemyResourceRepository
from utils.performance_logger import performance_monitor, log_permission_decision


class PermissionResolver:
    """
    Decides whether a user may access a folder or a document at a given level.

    Rules are evaluated in order and the first one that grants wins; anything
    that is not explicitly granted is denied. A missing resource is a plain
    denial so that callers cannot learn whether the resource exists.
    """

    def __init__(self, repository: Optional[ResourceRepository] = None):
        self.repository = repository or SqlAlchemyResourceRepository()

    def _active_user(self, user_id):
        """
        Return the caller when it can hold any access at all.

        Missing, soft-deleted and inactive users get None: no rule, not even
        ownership, can grant them anything.
        """
        user = self.repository.get_user(user_id)
        if user is None or not user.is_active:
            return None
        return user

    def _decide(self, user_id, resource, required, granted, rule):
        log_permission_decision(user_id, resource, required.value, granted, rule)
        return granted

    @performance_monitor("PermissionResolver.can_access_folder", operation_type="permission")
    def can_access_folder(self, user_id, folder_id, required) -> bool:
        resource = f"folder:{folder_id}"
        level = PermissionLevel.parse(required)
        if level is None:
            log_permission_decision(user_id, resource, str(required), False, "invalid_level")
            return False

        user = self._active_user(user_id)
        if user is None:
            return self._decide(user_id, resource, level, False, "unknown_or_inactive_user")
        role = user.role_enum

        if role is Role.SYSTEM_ADMIN:
            return self._decide(user_id, resource, level, True, "system_admin")

        folder = self.repository.get_folder(folder_id)
        if folder is None:
            return self._decide(user_id, resource, level, False, "folder_not_found")

        # Admin: accès complet à l'échelle de l'organisation
        if role is Role.ADMIN:
            return self._decide(user_id, resource, level, True, "admin")

        if folder.owner_id == user_id:
            return self._decide(user_id, resource, level, True, "owner")

        if folder.is_system_folder:
            if level is PermissionLevel.READ:
                return self._decide(user_id, resource, level, True, "system_folder_read")
            if level is PermissionLevel.WRITE and role is not None and role.can_write_system_folders:
                return self._decide(user_id, resource, level, True, "system_folder_write")

        grant = self.repository.find_grant(user_id, ResourceRef.folder(folder_id))
        if grant is None:
            return self._decide(user_id, resource, level, False, "no_grant")
        return self._decide(user_id, resource, level, grant.satisfies(level), "folder_grant")

    @performance_monitor("PermissionResolver.can_access_document", operation_type="permission")
    def can_access_document(self, user_id, document_id, required) -> bool:
        resource = f"document:{document_id}"
        level = PermissionLevel.parse(required)
        if level is None:
            log_permission_decision(user_id, resource, str(required), False, "invalid_level")
            return False

        user = self._active_user(user_id)
        if user is None:
            return self._decide(user_id, resource, level, False, "unknown_or_inactive_user")
        role = user.role_enum

        if role is not None and role.is_org_admin:
            return self._decide(user_id, resource, level, True, role.value.lower())

        document = self.repository.get_document(document_id)
        if document is None:
            return self._decide(user_id, resource, level, False, "document_not_found")

        if document.owner_id == user_id:
            return self._decide(user_id, resource, level, True, "owner")

        # Les permissions du dossier sont héritées par ses documents
        if self.can_access_folder(user_id, document.folder_id, level):
            return self._decide(user_id, resource, level, True, "inherited_folder")

        grant = self.repository.find_grant(user_id, ResourceRef.document(document_id))
        if grant is None:
            return self._decide(user_id, resource, level, False, "no_grant")
        return self._decide(user_id, resource, level, grant.satisfies(level), "document_grant")

    def can_access(self, user_id, ref: ResourceRef, required) -> bool:
        if ref.is_folder:
            return self.can_access_folder(user_id, ref.id, required)
        return self.can_access_document(user_id, ref.id, required)

    def effective_level(self, user_id, ref: ResourceRef) -> Optional[PermissionLevel]:
        """Highest level the user holds on `ref`, or None when it is not even readable."""
        for level in PermissionLevel.descending():
            if self.can_access(user_id, ref, level):
                return level
        return None
