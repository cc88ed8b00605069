from functools import partial

from flask import Flask, jsonify
from flask_cors import CORS

from app_settings import load_app_settings
from logger_config import setup_logger
from role_guard import (
    RESOLVER_EXTENSION_KEY,
    current_role_state,
    fetch_user_role,
    require_role,
)

from .error_boundary import register_error_boundary


# (url prefix, role the section requires)
ROLE_SECTIONS = [
    ("admin", "Admin"),
    ("hr", "HR"),
    ("employee", "Employee"),
    ("agency", "Agency"),
    ("applicant", "Applicant"),
]


def create_portal_app(settings=None, role_resolver=None):
    app = Flask(__name__)
    CORS(app)

    settings = settings or load_app_settings()
    logger = setup_logger("eachr.portal")
    app.config["NOT_AUTHORIZED_ROUTE"] = settings.not_authorized_route
    app.extensions[RESOLVER_EXTENSION_KEY] = role_resolver or partial(fetch_user_role, settings)
    register_error_boundary(app, logger)

    @app.route("/auth/me", methods=["GET"])
    def auth_me():
        state = current_role_state()
        return jsonify({
            "success": True,
            "authenticated": bool(state.user_id),
            "user_id": state.user_id,
            "status": state.status,
            "role": state.role,
            "error": state.error or None,
        })

    @app.route(settings.not_authorized_route, methods=["GET"])
    def not_authorized():
        return jsonify({"success": False, "message": "You are not authorized to view this page."}), 403

    def _section_view(section, required_role):
        @require_role(required_role)
        def view():
            return jsonify({"success": True, "section": section, "role": current_role_state().role})
        return view

    for section, required_role in ROLE_SECTIONS:
        app.add_url_rule(
            f"/{section}/home",
            endpoint=f"{section}_home",
            view_func=_section_view(section, required_role),
            methods=["GET"],
        )

    return app
