from flask import Blueprint, current_app, jsonify, request

from ..utils.constants import Role
from ..utils.decorators import login_required, role_required
from ..utils.serializers import serialize_doc, serialize_value

bp = Blueprint("vehicles", __name__, url_prefix="/api/vehicles")


def _service():
    return current_app.extensions["carhire"].vehicles


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.get("")
def list_vehicles():
    """Public catalogue with filters, sorting and pagination."""
    q = {k: (v or "").strip() for k, v in request.args.items()}
    nonempty = {k: v for k, v in q.items() if v}

    result = _service().filter_vehicles(
        make=nonempty.get("make"),
        model=nonempty.get("model"),
        year=nonempty.get("year"),
        min_daily_rate=nonempty.get("minDailyRate"),
        max_daily_rate=nonempty.get("maxDailyRate"),
        is_available=nonempty.get("isAvailable"),
        category=nonempty.get("category"),
        start=nonempty.get("startDate"),
        end=nonempty.get("endDate"),
        sort_by=nonempty.get("sortBy", "createdAt"),
        sort_order=nonempty.get("sortOrder", "desc"),
        page=nonempty.get("page"),
        limit=nonempty.get("limit"),
    )
    result["vehicles"] = [serialize_doc(v, "vehicle_id") for v in result["vehicles"]]
    resp = jsonify(result)
    resp.headers["Cache-Control"] = "public, max-age=60, stale-while-revalidate=30"
    return resp


@bp.get("/<vid>")
def vehicle_detail(vid):
    return jsonify(serialize_doc(_service().get_vehicle(vid), "vehicle_id"))


@bp.get("/<vid>/calendar")
def vehicle_calendar(vid):
    """Booked [start, end) windows, used by clients to disable dates."""
    ranges = current_app.extensions["carhire"].rentals.availability_calendar(vid)
    return jsonify({
        "success": True,
        "data": [{"start": serialize_value(s), "end": serialize_value(e)} for s, e in ranges],
    })


@bp.post("")
@login_required
@role_required(Role.ADMIN)
def create_vehicle():
    vehicle = _service().create_vehicle(_json_body())
    return jsonify(serialize_doc(vehicle, "vehicle_id")), 201


@bp.put("/<vid>")
@login_required
@role_required(Role.ADMIN)
def update_vehicle(vid):
    vehicle = _service().update_vehicle(vid, _json_body())
    return jsonify(serialize_doc(vehicle, "vehicle_id"))


@bp.delete("/<vid>")
@login_required
@role_required(Role.ADMIN)
def delete_vehicle(vid):
    _service().delete_vehicle(vid)
    return jsonify({"success": True, "message": "Vehicle deleted successfully"})


@bp.post("/<vid>/service")
@login_required
@role_required(Role.ADMIN)
def record_service(vid):
    vehicle = _service().record_service(vid, _json_body())
    return jsonify(serialize_doc(vehicle, "vehicle_id"))


@bp.put("/<vid>/primary-image")
@login_required
@role_required(Role.ADMIN)
def set_primary_image(vid):
    body = _json_body()
    url = body.get("primaryImage") if isinstance(body, dict) else None
    vehicle = _service().set_primary_image(vid, url)
    return jsonify(serialize_doc(vehicle, "vehicle_id"))
