def handle_admin_reset_password(body, get_auth_admin, logger):
    auth_user_id = str(body.get("auth_user_id") or "").strip()
    email = str(body.get("email") or "").strip()
    new_password = body.get("new_password")
    personal_email = body.get("personal_email")

    if not new_password:
        return {"error": "Missing new_password"}, 400
    if not auth_user_id and not email:
        return {"error": "Missing auth_user_id or email"}, 400

    admin = get_auth_admin()
    user_id = auth_user_id

    if not user_id:
        try:
            user = admin.find_user_by_email(email)
        except Exception as exc:
            logger.error("Error looking up user: %s", exc)
            return {"error": f"Failed to find user: {exc}"}, 500
        if not user:
            return {"error": f"User not found with email: {email}"}, 404
        user_id = user.get("id")

    try:
        admin.update_user_by_id(user_id, {"password": str(new_password)})
    except Exception as exc:
        logger.error("Error updating password: %s", exc)
        return {"error": f"Failed to update password: {exc}"}, 500

    logger.info("Password reset for user %s. New password should be sent to: %s", user_id, personal_email)
    return {"success": True, "message": "Password reset successfully"}, 200
