# studyenergy/routes/leaderboard_routes.py
from flask import Blueprint, jsonify

from ..services.accrual import utc_today
from ..services.leaderboard import get_leaderboard

leaderboard_bp = Blueprint("leaderboard", __name__)


@leaderboard_bp.route("", methods=["GET"])
def leaderboard():
    return jsonify({"leaderboard": get_leaderboard(utc_today())}), 200
