import json

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from app_settings import load_app_settings
from logger_config import setup_logger
from repositories.supabase_auth_client import SupabaseAuthAdmin
from repositories.supabase_rest_client import SupabaseRestClient

from .admin_reset_password import handle_admin_reset_password
from .create_employee_auth import handle_create_employee_auth, parse_lenient_body
from .request_password_reset import handle_request_password_reset
from .schedule_interview import handle_schedule_interview


CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


def _strict_json_body():
    body = json.loads(request.get_data(cache=True, as_text=True))
    return body if isinstance(body, dict) else {}


def create_functions_app(settings=None, auth_admin=None, rest_client=None):
    app = Flask(__name__)
    CORS(
        app,
        origins="*",
        send_wildcard=True,
        methods=["POST"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    settings = settings or load_app_settings()
    logger = setup_logger("eachr.edge_functions")

    def _auth_admin():
        return auth_admin or SupabaseAuthAdmin(settings.supabase_url, settings.service_role_key)

    def _rest_client():
        return rest_client or SupabaseRestClient(settings.supabase_url, settings.service_role_key)

    def _preflight():
        resp = jsonify("ok")
        resp.headers.update(PREFLIGHT_HEADERS)
        return resp, 200

    def _run(name, handler):
        if request.method == "OPTIONS":
            return _preflight()
        try:
            payload, status = handler()
        except Exception as exc:
            logger.exception("Unhandled error in %s", name)
            payload, status = {"error": str(exc) or "Unknown error"}, 500
        return jsonify(payload), status

    @app.route("/admin-reset-password", methods=["POST", "OPTIONS"])
    def admin_reset_password():
        return _run(
            "admin-reset-password",
            lambda: handle_admin_reset_password(_strict_json_body(), _auth_admin, logger),
        )

    @app.route("/create-employee-auth", methods=["POST", "OPTIONS"])
    def create_employee_auth():
        return _run(
            "create-employee-auth",
            lambda: handle_create_employee_auth(
                parse_lenient_body(request.get_data(cache=True, as_text=True)),
                settings,
                _auth_admin,
                _rest_client,
                logger,
            ),
        )

    @app.route("/request-password-reset", methods=["POST", "OPTIONS"])
    def request_password_reset():
        return _run(
            "request-password-reset",
            lambda: handle_request_password_reset(_strict_json_body(), _rest_client, logger),
        )

    @app.route("/schedule-interview-with-notification", methods=["POST", "OPTIONS"])
    def schedule_interview_with_notification():
        return _run(
            "schedule-interview-with-notification",
            lambda: handle_schedule_interview(_strict_json_body(), _rest_client, logger),
        )

    # Wrong method or unknown path still answers in JSON.
    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify({"error": exc.description or exc.name}), exc.code

    return app
