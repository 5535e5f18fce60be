# routes/__init__.py
from .auth_routes import auth_bp
from .permission_routes import permission_bp
from .folder_routes import folder_bp
from .document_routes import document_bp
from .admin_routes import admin_bp

def register_blueprints(app):
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(permission_bp, url_prefix="/permissions")
    app.register_blueprint(folder_bp, url_prefix="/folders")
    app.register_blueprint(document_bp, url_prefix="/documents")
    app.register_blueprint(admin_bp, url_prefix="/admin")
