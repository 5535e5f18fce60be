import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from sqlalchemy.exc import SQLAlchemyError
from dotenv import load_dotenv

from extensions import db, migrate
from config import Config
from routes import register_blueprints

load_dotenv()  # charge les variables d'environnement depuis .env

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("performance").setLevel(
        logging.DEBUG if app.config.get("ENABLE_PERFORMANCE_DEBUG") else logging.INFO
    )

    CORS(app,
         origins=app.config.get("CORS_ORIGINS", []),
         allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         supports_credentials=True)

    # Init extensions
    db.init_app(app)
    JWTManager(app)
    migrate.init_app(app, db)

    # Les modèles doivent être importés pour que create_all / alembic les voient
    import models  # noqa: F401

    register_blueprints(app)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error(f"Database error: {error}")
        return jsonify({"msg": "Erreur de base de données"}), 500

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=5001)
