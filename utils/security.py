from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask import jsonify
from extensions import db
from models.user import User, Role
import logging

logger = logging.getLogger(__name__)


def get_current_user_id():
    """ID de l'utilisateur authentifié (l'identité JWT est stockée en str)."""
    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError):
        return None


def get_current_user():
    user_id = get_current_user_id()
    if user_id is None:
        return None
    user = db.session.get(User, user_id)
    if user is None or not user.can_authenticate:
        return None
    return user


def role_required(*roles):
    """
    Décorateur Flask réservant une route à certains rôles.

    Le rôle est relu en base plutôt que dans le token, pour qu'un changement
    de rôle ou une désactivation prenne effet immédiatement.
    """
    allowed = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            user = get_current_user()
            if user is None:
                return jsonify({"msg": "Utilisateur non trouvé"}), 401

            if user.role_enum not in allowed:
                logger.warning(f"Role refused for user_id={user.id} role={user.role} allowed={sorted(r.value for r in allowed)}")
                return jsonify({"msg": "Accès réservé aux administrateurs"}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required(Role.SYSTEM_ADMIN, Role.ADMIN)
