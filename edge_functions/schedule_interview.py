from notifications import create_notifications, interview_notification, utc_now_iso


# Confirmation resets to Idle whenever an interview is set or moved.
IDLE_CONFIRMATION = "Idle"
INTERVIEW_STATUS = "interview"


def handle_schedule_interview(body, get_rest_client, logger):
    application_id = body.get("applicationId")
    interview = body.get("interview")
    if not application_id or not isinstance(interview, dict):
        return {"error": "Missing applicationId or interview data"}, 400

    rest = get_rest_client()
    filters = {"id": f"eq.{application_id}"}

    try:
        rows = rest.fetch_all(
            "applications",
            dict(filters, select="user_id,interview_date,interview_confirmed"),
        )
    except Exception as exc:
        logger.error("Error fetching application: %s", exc)
        rows = None
    if not rows or len(rows) != 1:
        return {"error": "Failed to fetch application"}, 500

    application = rows[0]
    is_reschedule = application.get("interview_date") is not None
    user_id = application.get("user_id")

    try:
        rest.update("applications", filters, {
            "interview_date": interview.get("date"),
            "interview_time": interview.get("time"),
            "interview_location": interview.get("location"),
            "interviewer": interview.get("interviewer"),
            "interview_confirmed": IDLE_CONFIRMATION,
            "interview_confirmed_at": None,
            "status": INTERVIEW_STATUS,
            "updated_at": utc_now_iso(),
        })
    except Exception as exc:
        logger.error("Error updating application: %s", exc)
        return {"error": "Failed to update application"}, 500

    row = interview_notification(user_id, application_id, interview, is_reschedule)
    try:
        create_notifications(rest, [row])
    except Exception as exc:
        # Interview is already saved; notification failure is logged only.
        logger.error("Error creating notification: %s", exc)

    logger.info("Email should be sent to user %s about %s", user_id, row["type"])
    return {
        "success": True,
        "message": "Interview scheduled and notification sent successfully",
        "isReschedule": is_reschedule,
    }, 200
