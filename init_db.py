#!/usr/bin/env python3
"""
Script pour initialiser la base de données
Crée toutes les tables définies dans les modèles SQLAlchemy, puis
l'arborescence par défaut si un administrateur existe déjà.
"""

import logging
from sqlalchemy import inspect
from app import create_app
from extensions import db
from models import User, Role
from services.folder_service import FolderService

logger = logging.getLogger(__name__)


def init_database(app=None):
    """Initialise la base de données en créant toutes les tables"""
    app = app or create_app()

    with app.app_context():
        logger.info("Création de toutes les tables...")
        db.create_all()

        tables = inspect(db.engine).get_table_names()
        logger.info(f"Tables créées ({len(tables)}): {', '.join(sorted(tables))}")

        admin = (User.query
                 .filter(User.role == Role.SYSTEM_ADMIN.value, User.is_deleted.is_(False))
                 .order_by(User.id)
                 .first())
        if admin is None:
            logger.warning("Aucun SystemAdmin: lancer create_admin.py pour créer l'arborescence par défaut")
            return None

        root = FolderService().seed_defaults(admin)
        logger.info(f"Arborescence par défaut prête sous {root.path}")
        return root


if __name__ == "__main__":
    init_database()
