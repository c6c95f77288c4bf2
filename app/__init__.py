import os
import secrets

from dotenv import load_dotenv
from flask import Flask, Response, g, render_template, request
from flask_caching import Cache
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError

load_dotenv()
db = SQLAlchemy()
cache = Cache()
csrf = CSRFProtect()

INVOICE_LIST_PATH = "/dashboard/invoices"


def _get_bool_env(var_name: str, default: bool = False) -> bool:
    """Return a boolean environment variable value."""

    value = os.getenv(var_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_CSP_TEMPLATE = (
    "default-src 'self'; "
    "img-src 'self' data:; "
    "style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'nonce-{nonce}'; "
    "frame-ancestors 'self'; "
    "form-action 'self'; "
    "object-src 'none'; "
    "base-uri 'self'"
)


def _database_uri(base_dir: str) -> str:
    """Resolve the SQLAlchemy URI from the environment.

    ``DATABASE_URL`` wins, then ``POSTGRES_URL`` (the variable exported by
    hosted Postgres integrations).  Without either, fall back to a SQLite
    file that can be relocated with ``DATABASE_PATH``.
    """
    url = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL")
    if url:
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url

    default_db_path = os.path.join(base_dir, "invoices.db")
    db_path = os.getenv("DATABASE_PATH", default_db_path)
    if os.path.isdir(db_path):
        db_path = os.path.join(db_path, "invoices.db")
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return f"sqlite:///{os.path.abspath(db_path)}"


def create_app(args: list, config: dict | None = None):
    """Application factory used by Flask."""
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    default_secure_cookies = "--demo" not in args
    session_cookie_secure = _get_bool_env(
        "SESSION_COOKIE_SECURE", default=default_secure_cookies
    )
    app.config["ENFORCE_HTTPS"] = _get_bool_env("ENFORCE_HTTPS", default=False)
    app.config.update(
        SESSION_COOKIE_SECURE=session_cookie_secure,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
    )
    # Absolute paths keep the database location stable when the test suite
    # changes the working directory after the app is created.
    app.config["SQLALCHEMY_DATABASE_URI"] = _database_uri(os.getcwd())
    app.config["CACHE_TYPE"] = os.getenv("CACHE_TYPE", "SimpleCache")
    app.config["CACHE_DEFAULT_TIMEOUT"] = int(
        os.getenv("CACHE_DEFAULT_TIMEOUT", "300")
    )
    app.config["INVOICE_LIST_PATH"] = INVOICE_LIST_PATH
    app.config["DEMO"] = "--demo" in args
    if config:
        app.config.update(config)

    db.init_app(app)
    from flask_migrate import Migrate

    Migrate(app, db)
    cache.init_app(app)
    csrf.init_app(app)

    @app.before_request
    def set_csp_nonce():
        """Generate a nonce for inline scripts allowed by the CSP."""

        g.csp_nonce = secrets.token_urlsafe(16)

    @app.after_request
    def apply_security_headers(response):
        """Attach standard security headers to every response."""
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.is_secure or app.config.get("ENFORCE_HTTPS", False):
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        nonce = getattr(g, "csp_nonce", "") or secrets.token_urlsafe(16)
        csp_template = app.config.get(
            "CONTENT_SECURITY_POLICY", DEFAULT_CSP_TEMPLATE
        )
        response.headers.setdefault(
            "Content-Security-Policy", csp_template.replace("{nonce}", nonce)
        )
        return response

    @app.context_processor
    def inject_csp_nonce():
        """Expose the CSP nonce to templates for inline scripts."""

        return {"csp_nonce": getattr(g, "csp_nonce", "")}

    @app.before_request
    def block_http_options():
        """Return a 405 for HTTP OPTIONS requests to reduce information leakage."""
        if request.method == "OPTIONS":
            return Response(status=405)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        """Render a helpful page when CSRF validation fails."""
        return (
            render_template(
                "errors/csrf_error.html",
                reason=error.description,
            ),
            400,
        )

    with app.app_context():
        # Create the schema on start so the app runs before migrations have
        # been applied.
        from . import models  # noqa: F401

        db.create_all()

        from app.routes.invoice_routes import invoice
        from app.services.invoice_actions import InvoiceActions
        from app.services.invoice_store import InvoiceStore
        from app.services.revalidation import revalidate_path

        app.register_blueprint(invoice)
        app.extensions["invoice_actions"] = InvoiceActions(
            store=InvoiceStore(db.session),
            revalidate=revalidate_path,
            list_path=app.config["INVOICE_LIST_PATH"],
            logger=app.logger,
        )

    return app
