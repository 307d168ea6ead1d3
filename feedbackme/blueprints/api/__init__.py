from flask import Blueprint, current_app, jsonify
from werkzeug.exceptions import HTTPException

from feedbackme.extensions import db
from feedbackme.services.errors import ServiceError

bp = Blueprint("api", __name__, url_prefix="/api")


def ok(data=None, status: int = 200, **extra):
    """Success envelope: {success: true, data, ...extra}."""
    payload = {"success": True}
    payload.update(extra)
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status


@bp.errorhandler(ServiceError)
def _service_error(e: ServiceError):
    db.session.rollback()
    return jsonify(e.to_payload()), e.status_code


@bp.errorhandler(HTTPException)
def _http_error(e: HTTPException):
    # 405/415/400 from werkzeug keep their code but speak the API envelope
    return jsonify({"success": False, "error": e.description or e.name}), e.code


@bp.errorhandler(Exception)
def _unexpected(e: Exception):
    db.session.rollback()
    current_app.logger.exception("Unhandled API error")
    return jsonify({"success": False, "error": "Internal server error"}), 500


# Import submodules so their @bp.route decorators register
from . import waitlist  # noqa: E402,F401
from . import projects  # noqa: E402,F401
from . import feedback  # noqa: E402,F401
from . import comments  # noqa: E402,F401
