from extensions import db
from .base import utcnow

class AccessLog(db.Model):
    __tablename__ = "access_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)  # NULL pour les actions système
    action = db.Column(db.String(50), nullable=False)
    target = db.Column(db.String(255), nullable=False)  # ressource concernée
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Action types constants
    ACTION_TYPES = [
        'LOGIN', 'REGISTER', 'CHANGE_PASSWORD',
        'CREATE_PERMISSION', 'UPDATE_PERMISSION', 'DELETE_PERMISSION',
        'CREATE_FOLDER', 'UPDATE_FOLDER', 'DELETE_FOLDER', 'CREATE_PERSONAL_FOLDER',
        'CREATE_DOCUMENT', 'UPDATE_DOCUMENT', 'CREATE_DOCUMENT_VERSION', 'DELETE_DOCUMENT',
    ]

    def __repr__(self):
        return f"<AccessLog user={self.user_id} action={self.action} target={self.target}>"

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'action': self.action,
            'target': self.target,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }
