from __future__ import annotations

import uuid
from typing import Optional

from flask import Blueprint, request, jsonify, abort, g
from sqlalchemy import or_, func

from models import storage
from models.marker import Marker
from models.schemas.common import parse_day
from models.schemas.marker import (
    MarkerCreateSchema,
    MarkerUpdateSchema,
    MarkerOutSchema,
    MarkerListItemSchema,
)
from utils.decorators import jwt_required
from utils.shortcode import generate_short_code, normalize_short_code

bp = Blueprint("markers", __name__)

# Schemas
marker_create_schema = MarkerCreateSchema()
marker_update_schema = MarkerUpdateSchema()
marker_out_schema = MarkerOutSchema()
markers_out_schema = MarkerOutSchema(many=True)
marker_items_schema = MarkerListItemSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy column
SORT_COLUMNS = {
    "name": Marker.name,
    "created_at": Marker.created_at,
    "updated_at": Marker.updated_at,
    "strain": Marker.strain,
    "quantity": Marker.quantity,
}
SORT_DIRECTIONS = ("asc", "desc")

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

SEARCH_COLUMNS = (
    Marker.name,
    Marker.description,
    Marker.strain,
    Marker.short_code,
    Marker.owner_name,
    Marker.owner_contact,
)

UPDATABLE_FIELDS = (
    "name",
    "latitude",
    "longitude",
    "description",
    "strain",
    "quantity",
    "image_url",
    "owner_name",
    "owner_contact",
)

SHORT_CODE_ATTEMPTS = 5


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def parse_pagination() -> tuple[int, int]:
    """Out-of-range or non-numeric values fall back to defaults instead of failing."""
    page = _int_arg("page", DEFAULT_PAGE)
    if page < 1:
        page = DEFAULT_PAGE
    per_page = _int_arg("per_page", DEFAULT_PER_PAGE)
    if per_page < 1:
        per_page = DEFAULT_PER_PAGE
    if per_page > MAX_PER_PAGE:
        per_page = MAX_PER_PAGE
    return page, per_page


def parse_sort() -> tuple[str, str]:
    sort_by = (request.args.get("sort_by") or "").strip().lower()
    if sort_by not in SORT_COLUMNS:
        sort_by = "created_at"
    sort_dir = (request.args.get("sort_dir") or "").strip().lower()
    if sort_dir not in SORT_DIRECTIONS:
        sort_dir = "desc"
    return sort_by, sort_dir


def parse_uuid(value: Optional[str]) -> Optional[str]:
    try:
        return str(uuid.UUID(value))
    except (TypeError, ValueError, AttributeError):
        return None


def total_pages(total_items: int, per_page: int) -> int:
    if total_items == 0:
        return 0
    return (total_items + per_page - 1) // per_page


def apply_filters(query):
    search = (request.args.get("search") or "").strip()
    date_from = parse_day(request.args.get("date_from"))
    date_to = parse_day(request.args.get("date_to"), end_of_day=True)
    creator_id = parse_uuid(request.args.get("creator_id"))

    if search:
        # Case-insensitive substring search across the text columns
        pattern = f"%{search.lower()}%"
        query = query.filter(or_(*(func.lower(col).like(pattern) for col in SEARCH_COLUMNS)))

    if date_from:
        query = query.filter(Marker.created_at >= date_from)

    if date_to:
        query = query.filter(Marker.created_at <= date_to)

    if creator_id:
        query = query.filter(Marker.creator_id == creator_id)

    return query


def get_marker_or_404(marker_id: str) -> Marker:
    parsed = parse_uuid(marker_id)
    if not parsed:
        abort(400, description="Invalid marker ID")
    marker = storage.get(Marker, parsed)
    if not marker:
        abort(404, description="Marker not found")
    return marker


def new_short_code(session) -> str:
    for _ in range(SHORT_CODE_ATTEMPTS):
        code = generate_short_code()
        if not session.query(Marker.id).filter(Marker.short_code == code).first():
            return code
    abort(500, description="Could not allocate a short code")


@bp.get("/markers")
@jwt_required()
def list_markers():
    """
    All markers in a lightweight shape for map display
    ---
    tags:
      - Markers
    security:
      - Bearer: []
    responses:
      200:
        description: id, short_code, name, latitude and longitude of every marker
    """
    session = storage.get_session()
    rows = session.query(Marker).order_by(Marker.created_at.desc()).all()
    return jsonify(
        {
            "message": "Markers retrieved successfully",
            "data": marker_items_schema.dump(rows),
        }
    )


@bp.get("/markers/paginated")
@jwt_required()
def list_markers_paginated():
    """
    List markers with pagination, sorting, search and filters
    ---
    tags:
      - Markers
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: per_page
        type: integer
        default: 10
        maximum: 100
      - in: query
        name: sort_by
        type: string
        enum: [name, created_at, updated_at, strain, quantity]
        default: created_at
      - in: query
        name: sort_dir
        type: string
        enum: [asc, desc]
        default: desc
      - in: query
        name: search
        type: string
        description: "Case-insensitive substring over name, description, strain, short_code, owner_name, owner_contact"
      - in: query
        name: date_from
        type: string
        format: date
      - in: query
        name: date_to
        type: string
        format: date
      - in: query
        name: creator_id
        type: string
    responses:
      200:
        description: A page of markers with pagination meta
    """
    session = storage.get_session()
    page, per_page = parse_pagination()
    sort_by, sort_dir = parse_sort()

    query = apply_filters(session.query(Marker))
    total = query.count()

    column = SORT_COLUMNS[sort_by]
    order = column.asc() if sort_dir == "asc" else column.desc()
    rows = []
    if total:
        rows = (
            query.order_by(order, Marker.id.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )

    return jsonify(
        {
            "message": "Markers retrieved successfully",
            "data": markers_out_schema.dump(rows),
            "meta": {
                "pagination": {
                    "current_page": page,
                    "per_page": per_page,
                    "total_items": total,
                    "total_pages": total_pages(total, per_page),
                },
                "sort_by": sort_by,
                "sort_dir": sort_dir,
            },
        }
    )


@bp.get("/markers/code/<short_code>")
def get_marker_by_code(short_code: str):
    """
    Public lookup by short code (QR label scan)
    ---
    tags:
      - Markers
    parameters:
      - in: path
        name: short_code
        type: string
        required: true
    responses:
      200:
        description: Marker found
      404:
        description: Not found
    """
    session = storage.get_session()
    marker = session.query(Marker).filter(Marker.short_code == normalize_short_code(short_code)).first()
    if not marker:
        abort(404, description="Marker not found")
    return jsonify({"data": marker_out_schema.dump(marker)})


@bp.post("/markers")
@jwt_required()
def create_marker():
    """
    Create a new marker; the caller becomes its creator
    ---
    tags:
      - Markers
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, latitude, longitude]
          properties:
            name: { type: string, maxLength: 100 }
            latitude: { type: string, example: "-6.20000000" }
            longitude: { type: string, example: "106.81666600" }
            description: { type: string }
            strain: { type: string, maxLength: 100 }
            quantity: { type: integer, minimum: 0 }
            image_url: { type: string }
            owner_name: { type: string, maxLength: 100 }
            owner_contact: { type: string, maxLength: 50 }
    responses:
      201:
        description: Created
      422:
        description: Validation error
    """
    session = storage.get_session()
    payload = request.get_json(silent=True) or {}
    data = marker_create_schema.load(payload)

    marker = Marker(
        short_code=new_short_code(session),
        creator_id=g.claims.user_id,
        name=data["name"],
        latitude=data["latitude"],
        longitude=data["longitude"],
        description=data.get("description"),
        strain=data.get("strain"),
        quantity=data.get("quantity"),
        image_url=data.get("image_url"),
        owner_name=data.get("owner_name"),
        owner_contact=data.get("owner_contact"),
    )
    storage.new(marker)
    storage.save()

    return jsonify(
        {
            "message": "Marker created successfully",
            "data": marker_out_schema.dump(marker),
        }
    ), 201


@bp.get("/markers/<marker_id>")
@jwt_required()
def get_marker(marker_id: str):
    """
    Get a single marker by id
    ---
    tags:
      - Markers
    security:
      - Bearer: []
    parameters:
      - in: path
        name: marker_id
        type: string
        required: true
    responses:
      200:
        description: Marker found
      400:
        description: Invalid marker ID
      404:
        description: Not found
    """
    marker = get_marker_or_404(marker_id)
    return jsonify({"data": marker_out_schema.dump(marker)})


@bp.put("/markers/<marker_id>")
@jwt_required()
def update_marker(marker_id: str):
    """
    Update a marker (fields not sent are kept)
    ---
    tags:
      - Markers
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: marker_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      404:
        description: Not found
      422:
        description: Validation error
    """
    marker = get_marker_or_404(marker_id)

    payload = request.get_json(silent=True) or {}
    data = marker_update_schema.load(payload)

    for field in UPDATABLE_FIELDS:
        if field in data:
            setattr(marker, field, data[field])

    storage.new(marker)
    storage.save()
    return jsonify(
        {
            "message": "Marker updated successfully",
            "data": marker_out_schema.dump(marker),
        }
    )


@bp.delete("/markers/<marker_id>")
@jwt_required()
def delete_marker(marker_id: str):
    """
    Delete a marker
    ---
    tags:
      - Markers
    security:
      - Bearer: []
    parameters:
      - in: path
        name: marker_id
        type: string
        required: true
    responses:
      204:
        description: Deleted
      404:
        description: Not found
    """
    marker = get_marker_or_404(marker_id)
    storage.delete(marker)
    storage.save()
    return ("", 204)
