import json

from repositories.supabase_auth_client import normalize_email


EMAIL_KEYS = ("email", "employeeEmail", "employee_email")
PASSWORD_KEYS = ("password", "employeePassword", "employee_password")
FIRST_NAME_KEYS = ("firstName", "first_name", "fname", "first")
LAST_NAME_KEYS = ("lastName", "last_name", "lname", "last")

EMPLOYEE_ROLE = "Employee"


def parse_lenient_body(raw):
    """Accept a JSON object, or the same object sent as a JSON-encoded string."""
    try:
        body = json.loads(raw or "")
    except ValueError:
        body = {}
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            body = {}
    return body if isinstance(body, dict) else {}


def _first_present(body, keys):
    for key in keys:
        if body.get(key) is not None:
            return body[key]
    return None


def handle_create_employee_auth(body, settings, get_auth_admin, get_rest_client, logger):
    email = normalize_email(_first_present(body, EMAIL_KEYS))
    password = _first_present(body, PASSWORD_KEYS)
    first_name = _first_present(body, FIRST_NAME_KEYS)
    last_name = _first_present(body, LAST_NAME_KEYS)

    logger.info(
        "Parsed values: email=%s has_password=%s first_name=%s last_name=%s",
        email, bool(password), first_name, last_name,
    )

    if not email or not password:
        logger.error("Validation failed - missing email or password")
        return {"error": "Missing email or password"}, 400

    if not settings.service_role_key:
        return {"error": "Service role key not configured"}, 500

    try:
        admin = get_auth_admin()
        # The listing is paginated; find_user_by_email walks every page.
        existing = admin.find_user_by_email(email)

        if existing:
            logger.info("User exists, updating password...")
            metadata = dict(existing.get("user_metadata") or {})
            metadata.update({"first_name": first_name, "last_name": last_name, "role": EMPLOYEE_ROLE})
            updated = admin.update_user_by_id(existing["id"], {
                "password": str(password),
                "email_confirm": True,
                "user_metadata": metadata,
            })
            user_id = updated.get("id") or existing["id"]
        else:
            logger.info("Creating new user...")
            created = admin.create_user({
                "email": email,
                "password": str(password),
                "email_confirm": True,
                "user_metadata": {"first_name": first_name, "last_name": last_name, "role": EMPLOYEE_ROLE},
            })
            user_id = created.get("id")

        try:
            get_rest_client().upsert(
                "profiles",
                [{
                    "id": user_id,
                    "email": email,
                    "role": EMPLOYEE_ROLE,
                    "first_name": first_name or "",
                    "last_name": last_name or "",
                }],
                on_conflict="id",
            )
        except Exception as exc:
            logger.warning("Profile upsert error (non-fatal): %s", exc)

        return {
            "success": True,
            "message": "Password updated successfully" if existing else "Account created successfully",
            "userId": user_id,
            "email": email,
        }, 200
    except Exception as exc:
        logger.exception("Error in create-employee-auth")
        return {"error": str(exc) or "Unknown error", "details": repr(exc)}, 500
