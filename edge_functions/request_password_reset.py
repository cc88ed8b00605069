from notifications import create_notifications, password_reset_request_notifications


# ilike without wildcards: case-insensitive equality on the free-text role.
RESET_RECIPIENT_FILTER = "(role.ilike.hr,role.ilike.admin)"


def handle_request_password_reset(body, get_rest_client, logger):
    work_email = str(body.get("work_email") or "").strip()
    if not work_email:
        return {"error": "Missing work_email"}, 400

    rest = get_rest_client()

    try:
        employees = rest.fetch_all(
            "employees",
            {"select": "id,fname,lname,email", "email": f"eq.{work_email}"},
        )
    except Exception as exc:
        logger.error("Error finding employee: %s", exc)
        employees = []

    if len(employees) != 1:
        return {"error": "Work email not found in the system"}, 404
    employee = employees[0]

    try:
        recipients = rest.fetch_all("profiles", {"select": "id,role", "or": RESET_RECIPIENT_FILTER})
    except Exception as exc:
        logger.error("Error finding HR/Admin users: %s", exc)
        return {"error": "Failed to find HR/Admin users"}, 500

    if not recipients:
        return {"error": "No HR or Admin users found in the system"}, 404

    employee_name = f"{employee.get('fname') or ''} {employee.get('lname') or ''}".strip()
    rows = password_reset_request_notifications(
        employee_name,
        work_email,
        [recipient.get("id") for recipient in recipients],
    )

    try:
        create_notifications(rest, rows)
    except Exception as exc:
        logger.error("Error creating notifications: %s", exc)
        return {"error": "Failed to create notifications"}, 500

    return {
        "success": True,
        "message": f"Password reset request sent to {len(recipients)} admin(s)",
        "employee_name": employee_name,
    }, 200
