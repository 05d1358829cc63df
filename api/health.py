from flask import Blueprint

from models import storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Liveness probe
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is running; reports the API version and database driver
    """
    from . import API_VERSION

    return {"status": "ok", "version": API_VERSION, "database": storage.dialect}, 200
