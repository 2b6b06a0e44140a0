# studyenergy/routes/energy_routes.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from ..models.user import User
from ..services.accrual import compute_status, list_today_activity, record_activity

energy_bp = Blueprint("energy", __name__)


@energy_bp.route("/status", methods=["GET"])
@jwt_required()
def status():
    """
    Returns:
    {
      "username": "ada",
      "lifetime_energy": 340,
      "today_energy": 20,
      "battery_balance": 2,
      "battery_earned_today": false,
      "bonus_active_today": true
    }
    """
    user_id = int(get_jwt_identity())
    user = User.query.get(user_id)
    if not user:
        return jsonify({"message": "user not found"}), 404

    payload = compute_status(user.id).to_dict()
    payload["username"] = user.username
    return jsonify(payload), 200


@energy_bp.route("/log", methods=["POST"])
@jwt_required()
def log_activity():
    """
    Expected body:
    {
      "type": "read",
      "points": 15      # negative values are penalties
    }
    """
    user_id = int(get_jwt_identity())
    data = request.get_json(silent=True) or {}

    # ValidationError / StorageError are mapped by the app error handlers
    result = record_activity(user_id, data.get("type"), data.get("points"))
    return jsonify(result.to_dict()), 200


@energy_bp.route("/history", methods=["GET"])
@jwt_required()
def history():
    user_id = int(get_jwt_identity())
    entries = list_today_activity(user_id)
    return jsonify({"entries": [e.to_dict() for e in entries]}), 200
