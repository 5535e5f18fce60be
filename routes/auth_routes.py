# routes/auth_routes.py

from flask import Blueprint, request, jsonify
from models.user import User, Role
from models.base import utcnow
from extensions import db
from flask_jwt_extended import create_access_token, jwt_required
from utils.access_logger import log_access_action
from utils.security import get_current_user

auth_bp = Blueprint("auth", __name__)


def _json_payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        if request.form:
            return request.form.to_dict()
        return None
    return data


def token_response(user, status_code=200):
    additional_claims = {"role": user.role}
    access_token = create_access_token(identity=str(user.id), additional_claims=additional_claims)
    return jsonify({
        "access_token": access_token,
        "user": user.to_dict()
    }), status_code


@auth_bp.route("/login", methods=["POST"])
def login():
    data = _json_payload()
    if data is None:
        return jsonify({"msg": "Payload JSON attendu"}), 400

    username = data.get("username")
    password = data.get("password")

    user = User.query.filter_by(username=username).first()
    if not user or not user.can_authenticate or not user.check_password(password):
        return jsonify({"msg": "Identifiants invalides"}), 401

    user.last_login_at = utcnow()
    log_access_action(user.id, "LOGIN", user.username)
    db.session.commit()
    return token_response(user)


@auth_bp.route("/register", methods=["POST"])
def register():
    """Inscription libre : le compte est créé actif avec le rôle User."""
    data = _json_payload()
    if data is None:
        return jsonify({"msg": "Payload JSON attendu"}), 400

    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip()
    password = data.get("password")
    if not username or not email or not password:
        return jsonify({"msg": "'username', 'email' et 'password' sont requis"}), 400

    if User.query.filter((User.username == username) | (User.email == email)).first():
        return jsonify({"msg": "Ce nom d'utilisateur ou cet email existe déjà"}), 409

    user = User(
        username=username,
        email=email,
        first_name=data.get("first_name") or "",
        last_name=data.get("last_name") or "",
        department=data.get("department"),
        role=Role.USER.value,
        is_active=True,
        created_by=username,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    log_access_action(user.id, "REGISTER", user.username)
    db.session.commit()
    return token_response(user, 201)


@auth_bp.route("/change-password", methods=["POST"])
@jwt_required()
def change_password():
    data = _json_payload() or {}
    user = get_current_user()
    if user is None:
        return jsonify({"msg": "Utilisateur non trouvé"}), 404

    current_password = data.get("current_password")
    new_password = data.get("new_password")
    if not new_password:
        return jsonify({"msg": "'new_password' est requis"}), 400
    if not user.check_password(current_password):
        return jsonify({"msg": "Mot de passe actuel incorrect"}), 400

    user.set_password(new_password)
    user.touch(user.username)
    log_access_action(user.id, "CHANGE_PASSWORD", user.username)
    db.session.commit()
    return jsonify({"msg": "Mot de passe modifié avec succès"}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = get_current_user()
    if user is None:
        return jsonify({"msg": "Utilisateur non trouvé"}), 404
    return jsonify(user.to_dict()), 200
