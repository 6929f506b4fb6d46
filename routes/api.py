# backend/routes/api.py

import math

from flask import Blueprint, request, jsonify, current_app
from utils.time import format_timestamp, local_now, parse_timestamp
from services.records import summarize
from services.telemetry import parse_number

api_bp = Blueprint("api", __name__)


def _engine():
    return current_app.extensions["energy_engine"]


# ===============================
# GET: Rooms
# ===============================
@api_bp.route("/rooms", methods=["GET"])
def list_rooms():
    """
    Rooms known from metadata or any instructor schedule
    """
    rooms = _engine().rooms()
    return jsonify({
        "rooms": [room.to_dict() for room in rooms]
    })


# ===============================
# GET: Room Consumption
# ===============================
@api_bp.route("/rooms/<room>/consumption", methods=["GET"])
def room_consumption(room):
    """
    Authoritative sample, session duration and cost for a room
    """
    report = _engine().room_report(room)

    if report is None:
        return jsonify({"error": "No data", "room": room}), 404

    return jsonify(report)


# ===============================
# GET: Room Usage Records
# ===============================
@api_bp.route("/rooms/<room>/records", methods=["GET"])
def room_records(room):
    """
    Historical usage records around `center` (defaults to now)
    """
    center_arg = request.args.get("center")
    if center_arg:
        center = parse_timestamp(center_arg)
        if center is None:
            return jsonify({
                "error": "Invalid center timestamp",
                "expected": "YYYY_MM_DD_HHMMSS"
            }), 400
    else:
        center = local_now()

    window_arg = request.args.get("window")
    if window_arg is None:
        window_hours = current_app.config["RECORD_WINDOW_HOURS"]
    else:
        try:
            window_hours = float(window_arg)
        except ValueError:
            return jsonify({"error": "Invalid window"}), 400
        if not math.isfinite(window_hours):
            return jsonify({"error": "Invalid window"}), 400
        if window_hours < 0:
            return jsonify({"error": "Window must not be negative"}), 400

    query = request.args.get("q", "")
    records = _engine().room_records(room, center, window_hours, query)

    return jsonify({
        "room": room,
        "center": format_timestamp(center),
        "window_hours": parse_number(window_hours),
        "query": query,
        "summary": summarize(records),
        "records": [r.to_dict() for r in records]
    })
