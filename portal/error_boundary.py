import traceback

from flask import jsonify
from werkzeug.exceptions import HTTPException


def register_error_boundary(app, logger):
    """Turn crashes inside portal views into a JSON 500 instead of an HTML error page."""

    @app.errorhandler(Exception)
    def _handle_uncaught(exc):
        if isinstance(exc, HTTPException):
            return exc
        logger.error("Portal view crashed: %s", exc, exc_info=exc)
        body = {
            "success": False,
            "error": "Something went wrong",
            "message": str(exc) or exc.__class__.__name__,
        }
        if app.debug:
            body["details"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return jsonify(body), 500

    return app
