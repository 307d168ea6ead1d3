from typing import Optional, Dict, Any
from urllib.parse import urljoin
import time

from flask import current_app, render_template
from flask_mail import Message

from feedbackme.extensions import mail


def absolute_url(path: str) -> str:
    base = current_app.config["APP_BASE_URL"].rstrip("/") + "/"
    path = path.lstrip("/")
    return urljoin(base, path)


def send_email(to_email: str, subject: str, template: str, context: Optional[Dict[str, Any]] = None) -> bool:
    """
    template: basename under templates/email/ without extension (e.g. 'waitlist').
    Renders both HTML and plaintext. Returns True when handed to the mail backend.
    SMTP failures are logged and reported as False; callers never see the exception.
    """
    context = context or {}
    msg = Message(recipients=[to_email], subject=subject)
    msg.body = render_template(f"email/{template}.txt", **context)
    msg.html = render_template(f"email/{template}.html", **context)

    start = time.perf_counter()
    try:
        mail.send(msg)
    except Exception as ex:
        current_app.logger.warning(
            "mail_send",
            extra={
                "event": "mail_send",
                "template": template,
                "outcome": "smtp_error",
                "latency_ms": int((time.perf_counter() - start) * 1000),
                "smtp_error": str(ex),
            },
        )
        return False

    current_app.logger.info(
        "mail_send",
        extra={
            "event": "mail_send",
            "template": template,
            "outcome": "sent",
            "latency_ms": int((time.perf_counter() - start) * 1000),
        },
    )
    return True


def send_waitlist_confirmation(registration, position: int) -> bool:
    site = current_app.config.get("SITE_NAME", "FeedbackMe")
    ctx = {
        "product_name": site,
        "full_name": registration.full_name,
        "position": position,
        "home_url": absolute_url("/"),
    }
    return send_email(
        to_email=registration.email,
        subject=f"You're on the {site} waitlist",
        template="waitlist",
        context=ctx,
    )
