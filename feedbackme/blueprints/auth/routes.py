from flask import render_template, request, redirect, url_for, jsonify, current_app
from flask_login import login_user, logout_user, current_user
from sqlalchemy import func
from feedbackme.extensions import db, limiter
from feedbackme.models import User
from feedbackme.observability import log_event
from feedbackme.services.policy import wants_json
from feedbackme.utils.validators import clean_str, is_valid_email, normalize_email
from . import bp


def _login_email_scope():
    email = normalize_email(_form_data().get("email"))
    # Keep a stable scope even if email is blank
    return f"login-email:{email or 'missing'}"

# Only allow internal paths like "/dashboard" (no external URLs or "//" protocol-relative).
def _safe_next_path(next_raw: str) -> str:
    next_raw = (next_raw or "").strip()
    if next_raw.startswith("/") and not next_raw.startswith("//"):
        return next_raw
    return url_for("dashboard.index")

def _form_data():
    if not request.is_json:
        return request.form
    data = request.get_json(silent=True)
    # arrays, strings and numbers are treated as an empty body
    return data if isinstance(data, dict) else {}

def _password(data) -> str:
    value = data.get("password")
    return value if isinstance(value, str) else ""

def _find_user(email: str):
    return db.session.execute(
        db.select(User).where(func.lower(User.email) == func.lower(email))
    ).scalar_one_or_none()

def _auth_error(template: str, status: int, errors: list, **ctx):
    if wants_json():
        return jsonify({"success": False, "error": errors[0], "details": errors}), status
    return render_template(template, errors=errors, **ctx), status


@bp.get("/login")
def login_get():
    if current_user.is_authenticated:
        return redirect(_safe_next_path(request.args.get("next")))
    return render_template("auth/login.html")

@bp.post("/login")
@limiter.limit("10 per minute; 100 per hour")              # per-IP (anon -> IP via _rate_limit_key)
@limiter.limit("5 per minute; 20 per hour", key_func=_login_email_scope)  # per-account
def login_post():
    data = _form_data()
    email = normalize_email(data.get("email"))
    password = _password(data)

    if not email or not password:
        return _auth_error("auth/login.html", 400, ["Email and password are required"])

    user = _find_user(email)
    if not user or not user.check_password(password) or not user.is_active:
        return _auth_error("auth/login.html", 400, ["Invalid credentials"])

    login_user(user)
    log_event(current_app.logger, "user_login", user_id=user.id)
    if wants_json():
        return jsonify({"success": True, "data": user.to_dict()})
    return redirect(_safe_next_path(request.args.get("next")))

@bp.post("/logout")
def logout_post():
    if current_user.is_authenticated:
        logout_user()
    if wants_json():
        return jsonify({"success": True})
    return redirect(url_for("main.home"))

@bp.get("/register")
def register_get():
    if current_user.is_authenticated:
        return redirect(_safe_next_path(request.args.get("next")))
    return render_template("auth/register.html")

@bp.post("/register")
@limiter.limit("5 per minute; 20 per hour")
def register_post():
    if current_user.is_authenticated:
        if wants_json():
            return jsonify({"success": True, "data": current_user.to_dict()})
        return redirect(url_for("dashboard.index"))

    data = _form_data()
    email = normalize_email(data.get("email"))
    password = _password(data)
    name = clean_str(data.get("name"), max_len=255)

    errors = []
    if not is_valid_email(email):
        errors.append("A valid email is required.")
    if not password or len(password) < 8:
        errors.append("Password must be at least 8 characters.")

    # case-insensitive uniqueness check
    if email and _find_user(email):
        errors.append("An account with that email already exists. Try signing in.")

    if errors:
        return _auth_error("auth/register.html", 400, errors, email=email, name=name)

    user = User(email=email, name=name)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    log_event(current_app.logger, "user_registered", user_id=user.id)
    if wants_json():
        return jsonify({"success": True, "data": user.to_dict()}), 201
    return redirect(url_for("dashboard.index"))
