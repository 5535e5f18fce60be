# routes/document_routes.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from models import PermissionLevel, ResourceKind, ResourceRef
from extensions import db
from services.document_service import DocumentService, DocumentError
from services.resource_repository import SqlAlchemyResourceRepository
from utils.access_logger import log_document_action
from utils.permission_middleware import (
    require_resource_permission, check_user_can_access, access_payload, forbidden
)
from utils.security import get_current_user, get_current_user_id

document_bp = Blueprint('document_bp', __name__)

document_service = DocumentService()
repository = SqlAlchemyResourceRepository()


@document_bp.errorhandler(DocumentError)
def handle_document_error(error):
    return jsonify({"msg": error.message, "code": error.code}), error.status_code


def document_payload(document, user_id, include_versions=False):
    data = document.to_dict()
    data["access"] = access_payload(user_id, ResourceRef.document(document.id))
    if include_versions:
        data["versions"] = [v.to_dict() for v in document.versions]
    return data


@document_bp.route('/<int:document_id>', methods=['GET'])
@require_resource_permission(ResourceKind.DOCUMENT, PermissionLevel.READ, 'document_id')
def get_document(document_id):
    document = repository.get_document(document_id)
    if document is None:
        return forbidden()
    return jsonify(document_payload(document, get_current_user_id(), include_versions=True)), 200


@document_bp.route('', methods=['POST'])
@jwt_required()
def create_document():
    """Créer un document (écriture requise sur le dossier cible)"""
    data = request.get_json(silent=True) or {}
    folder_id = data.get('folder_id')
    if folder_id is None or not data.get('title'):
        return jsonify({"msg": "'folder_id' et 'title' sont requis"}), 400

    current_user = get_current_user()
    if current_user is None:
        return forbidden()

    try:
        folder_id = int(folder_id)
    except (TypeError, ValueError):
        return jsonify({"msg": "'folder_id' doit être un entier"}), 400

    if not check_user_can_access(current_user.id, ResourceRef.folder(folder_id), PermissionLevel.WRITE):
        return forbidden()

    folder = repository.get_folder(folder_id)
    if folder is None:
        return forbidden()

    document = document_service.create_document(
        folder,
        current_user.id,
        title=data.get('title'),
        file_name=data.get('file_name') or data.get('title'),
        file_size=data.get('file_size') or 0,
        mime_type=data.get('mime_type') or "application/octet-stream",
        description=data.get('description'),
        file_path=data.get('file_path'),
        created_by=current_user.username,
    )
    log_document_action(current_user.id, 'CREATE_DOCUMENT', document)
    db.session.commit()
    return jsonify(document_payload(document, current_user.id)), 201


@document_bp.route('/<int:document_id>/versions', methods=['POST'])
@require_resource_permission(ResourceKind.DOCUMENT, PermissionLevel.WRITE, 'document_id')
def add_version(document_id):
    data = request.get_json(silent=True) or {}
    current_user = get_current_user()
    document = repository.get_document(document_id)
    if document is None:
        return forbidden()

    version = document_service.add_version(
        document,
        file_path=data.get('file_path'),
        file_size=data.get('file_size') or 0,
        mime_type=data.get('mime_type') or document.mime_type,
        comment=data.get('comment'),
        created_by=current_user.username if current_user else None,
    )
    log_document_action(current_user.id if current_user else None, 'CREATE_DOCUMENT_VERSION',
                        document, details=f"v{version.version_number}")
    db.session.commit()
    return jsonify(version.to_dict()), 201


@document_bp.route('/<int:document_id>', methods=['DELETE'])
@require_resource_permission(ResourceKind.DOCUMENT, PermissionLevel.ADMIN, 'document_id')
def delete_document(document_id):
    current_user = get_current_user()
    document = repository.get_document(document_id)
    if document is None:
        return forbidden()
    document_service.soft_delete_document(document, deleted_by=current_user.username if current_user else None)
    log_document_action(current_user.id if current_user else None, 'DELETE_DOCUMENT', document)
    db.session.commit()
    return jsonify({"msg": "Document supprimé"}), 200


@document_bp.route('', methods=['GET'])
@jwt_required()
def list_documents():
    """
    Liste paginée des documents lisibles par l'utilisateur.

    Query params:
    - folder_id: restreint à un dossier (lecture requise sur le dossier)
    - search: recherche dans le titre et la description
    - page: numéro de page (défaut: 1)
    - page_size: éléments par page (défaut: 20, max: 100)
    """
    user_id = get_current_user_id()
    folder_id = request.args.get('folder_id', type=int)
    if folder_id is None and request.args.get('folder_id'):
        return jsonify({"msg": "'folder_id' doit être un entier"}), 400

    page = request.args.get('page', 1, type=int)
    page_size = min(request.args.get('page_size', 20, type=int), 100)
    if page < 1 or page_size < 1:
        return jsonify({"msg": "'page' et 'page_size' doivent être positifs"}), 400

    if folder_id is not None and not check_user_can_access(user_id, ResourceRef.folder(folder_id), PermissionLevel.READ):
        return forbidden()

    readable = [
        document
        for document in document_service.list_documents(folder_id, request.args.get('search'))
        if check_user_can_access(user_id, ResourceRef.document(document.id), PermissionLevel.READ)
    ]

    total_count = len(readable)
    start_idx = (page - 1) * page_size
    items = readable[start_idx:start_idx + page_size]
    return jsonify({
        "items": [document_payload(document, user_id) for document in items],
        "page": page,
        "page_size": page_size,
        "total_count": total_count,
        "total_pages": (total_count + page_size - 1) // page_size,
    }), 200


@document_bp.route('/<int:document_id>', methods=['PUT'])
@require_resource_permission(ResourceKind.DOCUMENT, PermissionLevel.WRITE, 'document_id')
def update_document(document_id):
    data = request.get_json(silent=True) or {}
    current_user = get_current_user()
    document = repository.get_document(document_id)
    if document is None:
        return forbidden()

    document = document_service.update_document(
        document,
        title=data.get('title', document.title),
        description=data.get('description', document.description),
        status=data.get('status'),
        modified_by=current_user.username if current_user else None,
    )
    log_document_action(current_user.id if current_user else None, 'UPDATE_DOCUMENT', document)
    db.session.commit()
    return jsonify(document_payload(document, get_current_user_id())), 200


@document_bp.route('/<int:document_id>/versions', methods=['GET'])
@require_resource_permission(ResourceKind.DOCUMENT, PermissionLevel.READ, 'document_id')
def list_versions(document_id):
    document = repository.get_document(document_id)
    if document is None:
        return forbidden()
    versions = document_service.list_versions(document)
    return jsonify({"document_id": document_id, "versions": [v.to_dict() for v in versions]}), 200
