#!/usr/bin/env python3
"""
Script pour créer l'administrateur système et l'arborescence par défaut
"""

import os
import logging
from app import create_app
from extensions import db
from models.user import User, Role
from services.folder_service import FolderService

logger = logging.getLogger(__name__)


def create_admin_user(app=None):
    """Crée le SystemAdmin par défaut s'il n'existe pas encore"""
    app = app or create_app()

    with app.app_context():
        db.create_all()

        existing_admin = User.query.filter_by(role=Role.SYSTEM_ADMIN.value, is_deleted=False).first()
        if existing_admin:
            logger.info(f"Un administrateur existe déjà: {existing_admin.username}")
            FolderService().seed_defaults(existing_admin)
            return existing_admin

        admin_user = User(
            username=os.getenv("ADMIN_USERNAME", "admin"),
            email=os.getenv("ADMIN_EMAIL", "admin@edm.local"),
            first_name="System",
            last_name="Administrator",
            role=Role.SYSTEM_ADMIN.value,
            is_active=True,
            created_by="System",
        )
        admin_user.set_password(os.getenv("ADMIN_PASSWORD", "Admin@123"))

        db.session.add(admin_user)
        db.session.commit()

        FolderService().seed_defaults(admin_user)
        logger.info(f"Utilisateur administrateur créé: {admin_user.username} (id {admin_user.id})")
        return admin_user


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_admin_user()
