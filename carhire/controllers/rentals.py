from flask import Blueprint, current_app, g, jsonify, request

from ..utils.constants import Role
from ..utils.decorators import login_required, role_required
from ..utils.serializers import serialize_doc

bp = Blueprint("rentals", __name__, url_prefix="/api/rentals")


def _service():
    return current_app.extensions["carhire"].rentals


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.get("")
@login_required
def list_rentals():
    """Paginated rentals; admins see all, customers their own."""
    result = _service().list_rentals(
        g.principal,
        status=request.args.get("status") or None,
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return jsonify({
        "success": True,
        "data": [serialize_doc(r, "rental_id") for r in result["data"]],
        "pagination": result["pagination"],
    })


@bp.post("")
@login_required
def create_rental():
    """Book a vehicle for the current user."""
    rental = _service().create_rental(g.principal.user_id, _json_body())
    return jsonify({"success": True, "data": serialize_doc(rental, "rental_id")}), 201


@bp.get("/availability")
@login_required
def availability():
    args = request.args
    available = _service().query_availability(
        args.get("vehicleId"), args.get("startDate"), args.get("endDate")
    )
    return jsonify({"success": True, "available": available})


@bp.get("/<rid>")
@login_required
def get_rental(rid):
    rental = _service().get_rental(rid, g.principal)
    return jsonify({"success": True, "data": serialize_doc(rental, "rental_id")})


@bp.put("/<rid>")
@login_required
def update_rental(rid):
    """Status change and/or drivers, insurance, dates (owner or admin)."""
    rental = _service().update_rental(rid, _json_body(), g.principal)
    return jsonify({"success": True, "data": serialize_doc(rental, "rental_id")})


@bp.delete("/<rid>")
@login_required
@role_required(Role.ADMIN)
def delete_rental(rid):
    _service().delete_rental(rid)
    return jsonify({"success": True, "message": "Rental deleted successfully"})
