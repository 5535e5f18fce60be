# routes/admin_routes.py

import logging
from flask import Blueprint, jsonify
from extensions import db
from models.user import User
from services.folder_service import FolderService, FolderError
from utils.security import admin_required

admin_bp = Blueprint('admin', __name__)

logger = logging.getLogger(__name__)

folder_service = FolderService()


@admin_bp.errorhandler(FolderError)
def handle_folder_error(error):
    return jsonify({"msg": error.message, "code": error.code}), error.status_code


# ------------------------ DOSSIERS PERSONNELS ------------------------

@admin_bp.route('/personal-folders', methods=['POST'])
@admin_required
def run_personal_folder_migration():
    """Crée les dossiers personnels manquants pour tous les utilisateurs"""
    created = folder_service.ensure_personal_folders()
    logger.info(f"Personal folder migration created {created} folders")
    return jsonify({"msg": "Migration terminée", "created": created}), 200


@admin_bp.route('/personal-folders/<int:user_id>', methods=['POST'])
@admin_required
def create_personal_folder(user_id):
    user = db.session.get(User, user_id)
    created = folder_service.ensure_personal_folder(user)
    if not created:
        return jsonify({"msg": "Dossier déjà existant ou utilisateur introuvable", "created": False}), 200
    return jsonify({"msg": "Dossier personnel créé", "created": True}), 200
