from datetime import date, datetime, timezone


PASSWORD_RESET_REQUEST_TYPE = "password_reset_request"

INTERVIEW_SCHEDULED_TYPE = "interview_scheduled"
INTERVIEW_RESCHEDULED_TYPE = "interview_rescheduled"


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_notification(user_id, title, message, notification_type, application_id=None, now=None):
    row = {
        "user_id": user_id,
        "title": title,
        "message": message,
        "type": notification_type,
        "read": False,
        "created_at": now or utc_now_iso(),
    }
    if application_id is not None:
        row["application_id"] = application_id
    return row


def build_bulk_notifications(recipient_ids, title, message, notification_type, application_id=None, now=None):
    created_at = now or utc_now_iso()
    return [
        build_notification(
            user_id=recipient_id,
            title=title,
            message=message,
            notification_type=notification_type,
            application_id=application_id,
            now=created_at,
        )
        for recipient_id in recipient_ids
    ]


def password_reset_request_notifications(employee_name, work_email, recipient_ids, now=None):
    return build_bulk_notifications(
        recipient_ids,
        title="Password Reset Request",
        message=f"{employee_name} ({work_email}) has requested a password reset.",
        notification_type=PASSWORD_RESET_REQUEST_TYPE,
        now=now,
    )


def create_notifications(rest_client, rows):
    """Insert all rows in one request; an empty batch is a no-op."""
    rows = list(rows)
    if not rows:
        return []
    return rest_client.insert("notifications", rows)


def format_interview_date(value):
    """ISO date as "Monday, March 3, 2025"; anything unparseable is shown as given."""
    try:
        day = date.fromisoformat(str(value)[:10])
    except ValueError:
        return str(value)
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def interview_notification(user_id, application_id, interview, is_reschedule, now=None):
    when = format_interview_date(interview.get("date"))
    time = interview.get("time")
    location = interview.get("location")
    if is_reschedule:
        return build_notification(
            user_id,
            title="Interview Rescheduled",
            message=(
                f"Your interview has been rescheduled to {when} at {time} in {location}. "
                "Please check your application and confirm your availability."
            ),
            notification_type=INTERVIEW_RESCHEDULED_TYPE,
            application_id=application_id,
            now=now,
        )
    return build_notification(
        user_id,
        title="Interview Scheduled",
        message=(
            f"Your interview has been scheduled for {when} at {time} in {location}. "
            "Please confirm your availability."
        ),
        notification_type=INTERVIEW_SCHEDULED_TYPE,
        application_id=application_id,
        now=now,
    )
