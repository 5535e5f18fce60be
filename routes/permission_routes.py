# routes/permission_routes.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from models import PermissionLevel, ResourceKind
from services.permission_service import PermissionService, GrantRequest, PermissionValidationError
from utils.permission_middleware import require_resource_permission, check_user_can_access, forbidden
from utils.security import get_current_user, get_current_user_id

permission_bp = Blueprint('permission', __name__)

permission_service = PermissionService()


@permission_bp.errorhandler(PermissionValidationError)
def handle_validation_error(error):
    return jsonify({"msg": error.message, "code": error.code}), error.status_code


# ===================== LECTURE =====================

@permission_bp.route('/user/<int:user_id>', methods=['GET'])
@jwt_required()
def get_user_permissions(user_id):
    """Permissions d'un utilisateur : lui-même ou un administrateur"""
    current_user = get_current_user()
    if current_user is None:
        return forbidden()

    role = current_user.role_enum
    if current_user.id != user_id and not (role is not None and role.is_org_admin):
        return forbidden()

    return jsonify(permission_service.list_user_permissions(user_id)), 200


@permission_bp.route('/folder/<int:folder_id>', methods=['GET'])
@require_resource_permission(ResourceKind.FOLDER, PermissionLevel.ADMIN, 'folder_id')
def get_folder_permissions(folder_id):
    return jsonify(permission_service.list_folder_permissions(folder_id)), 200


@permission_bp.route('/document/<int:document_id>', methods=['GET'])
@require_resource_permission(ResourceKind.DOCUMENT, PermissionLevel.ADMIN, 'document_id')
def get_document_permissions(document_id):
    return jsonify(permission_service.list_document_permissions(document_id)), 200


# ===================== ATTRIBUTION / RÉVOCATION =====================

@permission_bp.route('', methods=['POST'])
@jwt_required()
def grant_permission():
    """Créer ou mettre à jour une permission (Admin requis sur la ressource)"""
    grant_request = GrantRequest.from_payload(request.get_json(silent=True))
    if grant_request.resource is None:
        return jsonify({"msg": "Indiquer 'folder_id' ou 'document_id'", "code": "RESOURCE_REQUIRED"}), 400

    current_user = get_current_user()
    if current_user is None:
        return forbidden()
    if not check_user_can_access(current_user.id, grant_request.resource, PermissionLevel.ADMIN):
        return forbidden()

    permission = permission_service.grant_permission(
        grant_request, current_user.username, actor_id=current_user.id
    )
    if permission is None:
        return jsonify({"msg": "Impossible d'accorder la permission"}), 400

    return jsonify({"msg": "Permission accordée", "permission": permission}), 200


@permission_bp.route('/<int:permission_id>', methods=['DELETE'])
@jwt_required()
def revoke_permission(permission_id):
    current_user_id = get_current_user_id()
    permission = permission_service.get_permission(permission_id)
    if permission is None:
        return jsonify({"msg": "Permission introuvable"}), 404

    if not check_user_can_access(current_user_id, permission.resource, PermissionLevel.ADMIN):
        return forbidden()

    current_user = get_current_user()
    if not permission_service.revoke_permission(
        permission_id,
        revoked_by=current_user.username if current_user else None,
        actor_id=current_user_id,
    ):
        return jsonify({"msg": "Permission introuvable"}), 404

    return jsonify({"msg": "Permission révoquée"}), 200
