# services/permission_service.py

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from models import Permission, PermissionLevel, ResourceRef
from services.resource_repository import ResourceRepository, SqlAlchemyResourceRepository
from utils.access_logger import log_permission_action

logger = logging.getLogger(__name__)


class PermissionValidationError(Exception):
    """Invalid grant request, mapped to a client error by the API layer"""
    def __init__(self, message: str, status_code: int = 400, code: str = 'INVALID_PERMISSION_REQUEST'):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


def _parse_id(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PermissionValidationError(f"'{key}' doit être un entier", code='INVALID_ID')


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, datetime):
        try:
            value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise PermissionValidationError("'expires_at' doit être une date ISO-8601", code='INVALID_DATE')
    # Les colonnes stockent de l'UTC naïf ; une date sans fuseau est déjà en UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass
class GrantRequest:
    """A request to grant `permission_type` on `resource` to `user_id`."""
    user_id: int
    resource: Optional[ResourceRef]
    permission_type: PermissionLevel
    expires_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'GrantRequest':
        """
        Build a request from a JSON payload.

        A payload naming no resource yields `resource=None`, which the service
        reports as a failed grant. Every other malformed payload raises.

        Raises:
            PermissionValidationError
        """
        if not isinstance(data, dict):
            raise PermissionValidationError("Payload JSON attendu", code='INVALID_PAYLOAD')

        user_id = _parse_id(data, 'user_id')
        if user_id is None:
            raise PermissionValidationError("'user_id' est requis", code='USER_REQUIRED')

        folder_id = _parse_id(data, 'folder_id')
        document_id = _parse_id(data, 'document_id')
        if folder_id is not None and document_id is not None:
            raise PermissionValidationError(
                "Indiquer soit 'folder_id', soit 'document_id', pas les deux",
                code='AMBIGUOUS_RESOURCE'
            )

        level = PermissionLevel.parse(data.get('permission_type'))
        if level is None:
            raise PermissionValidationError(
                "'permission_type' doit être Read, Write ou Admin",
                code='INVALID_PERMISSION_TYPE'
            )

        if folder_id is not None:
            resource = ResourceRef.folder(folder_id)
        elif document_id is not None:
            resource = ResourceRef.document(document_id)
        else:
            resource = None

        return cls(
            user_id=user_id,
            resource=resource,
            permission_type=level,
            expires_at=_parse_datetime(data.get('expires_at')),
        )


class PermissionService:
    """Grant, revoke and list explicit permissions."""

    def __init__(self, repository: Optional[ResourceRepository] = None):
        self.repository = repository or SqlAlchemyResourceRepository()

    def grant_permission(self, request: GrantRequest, granted_by: str,
                         actor_id: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Create the grant, or update the existing one for the same (user, resource).

        Args:
            request: The grant request
            granted_by: Name of the grantor, stored in the audit fields
            actor_id: ID of the grantor for the access log

        Returns:
            The grant projection, or None when the request names no resource

        Raises:
            PermissionValidationError: If the grantee or the resource does not exist
        """
        if request.resource is None:
            logger.info(f"Grant refused for user {request.user_id}: resource reference required")
            return None

        if self.repository.get_user(request.user_id) is None:
            raise PermissionValidationError("Utilisateur introuvable", 404, 'USER_NOT_FOUND')
        if request.resource.is_folder:
            target = self.repository.get_folder(request.resource.id)
        else:
            target = self.repository.get_document(request.resource.id)
        if target is None:
            raise PermissionValidationError("Ressource introuvable", 404, 'RESOURCE_NOT_FOUND')

        permission, created = self.repository.upsert_grant(
            user_id=request.user_id,
            ref=request.resource,
            level=request.permission_type,
            granted_by=granted_by,
            expires_at=_parse_datetime(request.expires_at),
        )
        action = 'CREATE_PERMISSION' if created else 'UPDATE_PERMISSION'
        log_permission_action(actor_id, action, permission, actor=granted_by)
        self.repository.commit()

        logger.info(
            f"{action}: {permission.permission_type} on {permission.resource} "
            f"for user {permission.user_id} by {granted_by}"
        )
        return permission.to_dict()

    def revoke_permission(self, permission_id: int, revoked_by: Optional[str] = None,
                          actor_id: Optional[int] = None) -> bool:
        """
        Delete a grant. Returns False when no grant has this id.

        Access inherited from a folder grant is computed, never stored, so
        nothing else has to be cleaned up.
        """
        permission = self.repository.get_grant(permission_id)
        if permission is None:
            return False

        log_permission_action(actor_id, 'DELETE_PERMISSION', permission, actor=revoked_by)
        self.repository.delete_grant(permission)
        self.repository.commit()
        logger.info(f"DELETE_PERMISSION: grant {permission_id} revoked by {revoked_by}")
        return True

    def get_permission(self, permission_id: int) -> Optional[Permission]:
        return self.repository.get_grant(permission_id)

    def list_user_permissions(self, user_id: int) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.repository.list_grants_for_user(user_id)]

    def list_folder_permissions(self, folder_id: int) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.repository.list_grants_for_folder(folder_id)]

    def list_document_permissions(self, document_id: int) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.repository.list_grants_for_document(document_id)]
