from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf import CSRFProtect
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_mail import Mail

db = SQLAlchemy()
migrate = Migrate()

# HTML forms only; the /api blueprint is exempted in create_app()
csrf = CSRFProtect()

login_manager = LoginManager()
login_manager.login_view = "auth.login_get"
login_manager.login_message = "Sign in to manage your projects."
login_manager.login_message_category = "info"

def _rate_limit_key():
    """Voters and commenters are limited per account; guests per client IP."""
    from flask_login import current_user  # lazy: avoids circulars during app init
    if getattr(current_user, "is_authenticated", False) and getattr(current_user, "id", None):
        return f"user:{current_user.id}"
    return f"ip:{get_remote_address()}"

# Storage URI is chosen per APP_ENV in create_app(); no global default limit
limiter = Limiter(key_func=_rate_limit_key)

# Waitlist confirmations
mail = Mail()
