# utils/permission_middleware.py

import logging
from functools import wraps
from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request
from models import PermissionLevel, ResourceKind, ResourceRef
from services.permission_resolver import PermissionResolver
from utils.security import get_current_user_id

logger = logging.getLogger(__name__)

permission_resolver = PermissionResolver()


def forbidden():
    # Même réponse quelle que soit la raison du refus (ressource absente, pas de permission, compte inactif)
    return jsonify({"msg": "Accès refusé"}), 403


def require_resource_permission(kind: ResourceKind, level: PermissionLevel, arg_name: str):
    """
    Décorateur vérifiant l'accès de l'utilisateur courant à une ressource.

    Args:
        kind: ResourceKind.FOLDER ou ResourceKind.DOCUMENT
        level: niveau requis (Read, Write, Admin)
        arg_name: nom du paramètre de route portant l'ID de la ressource
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            user_id = get_current_user_id()
            ref = ResourceRef(kind, kwargs[arg_name])

            if not permission_resolver.can_access(user_id, ref, level):
                logger.info(f"Access denied: user_id={user_id} {ref} level={level.value}")
                return forbidden()

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def check_user_can_access(user_id, ref: ResourceRef, level: PermissionLevel) -> bool:
    return permission_resolver.can_access(user_id, ref, level)


def access_payload(user_id, ref: ResourceRef):
    """Niveau effectif de l'utilisateur, pour les réponses JSON."""
    level = permission_resolver.effective_level(user_id, ref)
    return level.value if level else None
