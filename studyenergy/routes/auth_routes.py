# studyenergy/routes/auth_routes.py

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import db
from ..models.user import USERNAME_MAX_LENGTH, User

auth_bp = Blueprint("auth", __name__)

PASSWORD_MIN_LENGTH = 3


# -----------------------------
# Routes
# -----------------------------
@auth_bp.route("/signup", methods=["POST"])
def signup():
    data = request.get_json(silent=True) or {}

    username = (data.get("username") or "").strip()
    password = data.get("password") or ""  # do NOT strip passwords

    if not username or not password:
        return jsonify({"message": "username and password are required"}), 400

    if len(username) > USERNAME_MAX_LENGTH:
        return jsonify({"message": f"username too long (max {USERNAME_MAX_LENGTH} chars)"}), 400

    if len(password) < PASSWORD_MIN_LENGTH:
        return jsonify({"message": f"password too short (min {PASSWORD_MIN_LENGTH} chars)"}), 400

    if User.find_by_username(username):
        return jsonify({"message": "username already taken"}), 409

    user = User()
    user.set_username(username)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        # same handle registered concurrently
        db.session.rollback()
        return jsonify({"message": "username already taken"}), 409
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception(f"Signup Error: {e}")
        return jsonify({"message": "Internal server error"}), 500

    current_app.logger.info(f"[auth/signup] user_id={user.id} username='{user.username}'")
    access_token = create_access_token(identity=str(user.id))
    return jsonify({"token": access_token, "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}

    username = (data.get("username") or "").strip()
    password = data.get("password") or ""

    if not username or not password:
        return jsonify({"message": "username and password are required"}), 400

    user = User.find_by_username(username)

    if not user or not user.check_password(password):
        current_app.logger.info(f"[auth/login] rejected username='{username}'")
        return jsonify({"message": "invalid username or password"}), 401

    access_token = create_access_token(identity=str(user.id))
    return jsonify({"token": access_token, "user": user.to_dict()}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user_id = int(get_jwt_identity())
    user = User.query.get(user_id)
    if not user:
        return jsonify({"message": "user not found"}), 404
    return jsonify({"user": user.to_dict()}), 200
