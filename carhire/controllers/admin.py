from flask import Blueprint, current_app, jsonify

from ..utils.constants import Role
from ..utils.decorators import login_required, role_required
from ..utils.serializers import serialize_value

bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@bp.get("/dashboard")
@login_required
@role_required(Role.ADMIN)
def dashboard():
    """Admin dashboard: totals, recent rentals, popular vehicles."""
    data = current_app.extensions["carhire"].analytics.dashboard()
    return jsonify(serialize_value(data))
