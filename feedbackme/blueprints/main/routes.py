from flask import render_template, request, redirect, url_for, flash
from flask_login import current_user

from feedbackme.services import waitlist as waitlist_service
from feedbackme.services.errors import ValidationError
from . import bp

@bp.get("/")
def home():
    """Public landing page with the waitlist form."""
    return render_template(
        "home.html",
        total_registrations=waitlist_service.total_registrations(),
        is_authenticated=getattr(current_user, "is_authenticated", False),
    )

@bp.post("/waitlist")
def waitlist_form():
    """No-JS fallback for the landing page form; the widget uses POST /api/waitlist."""
    try:
        data, is_existing = waitlist_service.register({
            "fullName": request.form.get("fullName"),
            "email": request.form.get("email"),
        })
    except ValidationError as e:
        for d in e.details or []:
            flash(d["message"], "warning")
        return redirect(url_for("main.home"))

    if is_existing:
        flash(f"You're already on the waitlist (#{data['position']}).", "info")
    else:
        flash(f"Thanks! You're #{data['position']} on the waitlist.", "success")
    return redirect(url_for("main.home"))
