# routes/folder_routes.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from models import Document, PermissionLevel, ResourceKind, ResourceRef
from extensions import db
from services.folder_service import FolderService, FolderError
from services.resource_repository import SqlAlchemyResourceRepository
from utils.access_logger import log_folder_action
from utils.permission_middleware import (
    require_resource_permission, check_user_can_access, access_payload, forbidden
)
from utils.security import get_current_user, get_current_user_id

folder_bp = Blueprint('folder_bp', __name__)

folder_service = FolderService()
repository = SqlAlchemyResourceRepository()


@folder_bp.errorhandler(FolderError)
def handle_folder_error(error):
    return jsonify({"msg": error.message, "code": error.code}), error.status_code


def folder_payload(folder, user_id):
    data = folder.to_dict()
    data["access"] = access_payload(user_id, ResourceRef.folder(folder.id))
    return data


@folder_bp.route('/root', methods=['GET'])
@jwt_required()
def get_root_folder():
    user_id = get_current_user_id()
    root = folder_service.get_root()
    if root is None or not check_user_can_access(user_id, ResourceRef.folder(root.id), PermissionLevel.READ):
        return forbidden()
    return jsonify(folder_payload(root, user_id)), 200


@folder_bp.route('/<int:folder_id>', methods=['GET'])
@require_resource_permission(ResourceKind.FOLDER, PermissionLevel.READ, 'folder_id')
def get_folder(folder_id):
    folder = repository.get_folder(folder_id)
    if folder is None:
        return forbidden()
    return jsonify(folder_payload(folder, get_current_user_id())), 200


@folder_bp.route('/<int:folder_id>/children', methods=['GET'])
@require_resource_permission(ResourceKind.FOLDER, PermissionLevel.READ, 'folder_id')
def list_children(folder_id):
    """Sous-dossiers visibles par l'utilisateur (lecture requise sur chacun)"""
    user_id = get_current_user_id()
    children = [
        folder_payload(child, user_id)
        for child in folder_service.list_children(folder_id)
        if check_user_can_access(user_id, ResourceRef.folder(child.id), PermissionLevel.READ)
    ]
    return jsonify({"folder_id": folder_id, "folders": children}), 200


@folder_bp.route('', methods=['POST'])
@jwt_required()
def create_folder():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    parent_id = data.get('parent_id')
    if not name or parent_id is None:
        return jsonify({"msg": "'name' et 'parent_id' sont requis"}), 400

    current_user = get_current_user()
    if current_user is None:
        return forbidden()

    try:
        parent_id = int(parent_id)
    except (TypeError, ValueError):
        return jsonify({"msg": "'parent_id' doit être un entier"}), 400

    if not check_user_can_access(current_user.id, ResourceRef.folder(parent_id), PermissionLevel.WRITE):
        return forbidden()

    parent = repository.get_folder(parent_id)
    if parent is None:
        return forbidden()

    folder = folder_service.create_folder(
        name,
        current_user.id,
        parent=parent,
        description=data.get('description'),
        created_by=current_user.username,
    )
    log_folder_action(current_user.id, 'CREATE_FOLDER', folder)
    db.session.commit()
    return jsonify(folder_payload(folder, current_user.id)), 201


@folder_bp.route('/<int:folder_id>', methods=['DELETE'])
@require_resource_permission(ResourceKind.FOLDER, PermissionLevel.ADMIN, 'folder_id')
def delete_folder(folder_id):
    current_user = get_current_user()
    folder = repository.get_folder(folder_id)
    if folder is None:
        return forbidden()
    count = folder_service.soft_delete_folder(folder, deleted_by=current_user.username if current_user else None)
    log_folder_action(current_user.id if current_user else None, 'DELETE_FOLDER', folder)
    db.session.commit()
    return jsonify({"msg": "Dossier supprimé", "deleted_folders": count}), 200


@folder_bp.route('', methods=['GET'])
@jwt_required()
def list_folders():
    """
    Dossiers d'un niveau de l'arbre, filtrés par lecture.

    Sans `parent_id`, renvoie le niveau racine.
    """
    user_id = get_current_user_id()
    parent_id = request.args.get('parent_id', type=int)
    if parent_id is None and request.args.get('parent_id'):
        return jsonify({"msg": "'parent_id' doit être un entier"}), 400

    if parent_id is None:
        root = folder_service.get_root()
        candidates = [root] if root is not None else []
    else:
        candidates = folder_service.list_children(parent_id)

    folders = []
    for folder in candidates:
        if not check_user_can_access(user_id, ResourceRef.folder(folder.id), PermissionLevel.READ):
            continue
        data = folder_payload(folder, user_id)
        data["subfolder_count"] = len(folder_service.list_children(folder.id))
        data["document_count"] = Document.query.filter_by(folder_id=folder.id, is_deleted=False).count()
        folders.append(data)
    return jsonify({"parent_id": parent_id, "folders": folders}), 200


@folder_bp.route('/<int:folder_id>', methods=['PUT'])
@require_resource_permission(ResourceKind.FOLDER, PermissionLevel.WRITE, 'folder_id')
def update_folder(folder_id):
    data = request.get_json(silent=True) or {}
    current_user = get_current_user()
    folder = repository.get_folder(folder_id)
    if folder is None:
        return forbidden()

    folder = folder_service.update_folder(
        folder,
        data.get('name', folder.name),
        description=data.get('description', folder.description),
        modified_by=current_user.username if current_user else None,
    )
    log_folder_action(current_user.id if current_user else None, 'UPDATE_FOLDER', folder)
    db.session.commit()
    return jsonify(folder_payload(folder, get_current_user_id())), 200
