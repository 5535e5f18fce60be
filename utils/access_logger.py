# utils/access_logger.py

import logging
from models.access_log import AccessLog
from models.base import utcnow
from extensions import db

logger = logging.getLogger(__name__)

TARGET_MAX_LENGTH = 255


def log_access_action(user_id, action, target, details=None):
    """
    Enregistre une action dans les logs d'accès

    Args:
        user_id (int): ID de l'utilisateur qui effectue l'action (None pour le système)
        action (str): Type d'action (CREATE_PERMISSION, DELETE_PERMISSION, ...)
        target (str): Cible de l'action
        details (str, optional): Détails supplémentaires sur l'action
    """
    log_target = f"{target} - {details}" if details else target
    if len(log_target) > TARGET_MAX_LENGTH:
        log_target = log_target[:TARGET_MAX_LENGTH - 3] + "..."

    db.session.add(AccessLog(
        user_id=user_id,
        action=action,
        target=log_target,
        timestamp=utcnow()
    ))
    # Note: Le commit sera fait par la fonction appelante
    logger.info(f"Audit: user={user_id} action={action} target={log_target}")


def log_permission_action(user_id, action, permission, actor=None):
    """
    Enregistre une action sur une permission (création, mise à jour, révocation)

    Args:
        user_id (int): ID de l'utilisateur qui effectue l'action
        action (str): CREATE_PERMISSION, UPDATE_PERMISSION, DELETE_PERMISSION
        permission (Permission): La permission concernée
        actor (str, optional): Nom de l'utilisateur qui effectue l'action
    """
    target = f"{permission.resource} pour user {permission.user_id}"
    details = f"Niveau: {permission.permission_type}"
    if actor:
        details = f"{details} (par {actor})"
    log_access_action(user_id, action, target, details)


def log_folder_action(user_id, action, folder):
    """Enregistre les opérations sur les dossiers"""
    log_access_action(user_id, action, f"Dossier '{folder.path}'")


def log_document_action(user_id, action, document, details=None):
    """Enregistre les opérations sur les documents"""
    log_access_action(user_id, action, f"Document '{document.title}' (id {document.id})", details)
