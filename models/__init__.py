from .user import User, Role
from .folder import Folder
from .document import Document
from .document_version import DocumentVersion
from .permission import Permission, PermissionLevel, ResourceKind, ResourceRef
from .access_log import AccessLog

__all__ = [
    "User",
    "Role",
    "Folder",
    "Document",
    "DocumentVersion",
    "Permission",
    "PermissionLevel",
    "ResourceKind",
    "ResourceRef",
    "AccessLog",
]
