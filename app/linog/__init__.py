import logging
import uuid

from flask import Flask, g, jsonify
from dotenv import load_dotenv
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from app.linog.config import DEV_SECRET_KEY, load_config
from app.linog.db import init_db, teardown_db_session
from app.linog.errors import LinogError
from app.linog.models import Base
from app.linog.routes import bp as routes_bp
from app.linog.auth import bp as auth_bp
from app.linog.security import init_tokens
from app.linog.modules.updates.routes import bp as updates_bp
from app.linog.modules.donations.routes import bp as donations_bp
from app.linog.modules.markers.routes import bp as markers_bp
from app.linog.modules.image_groups.routes import bp as image_groups_bp

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    is_production = env in ("prod", "production")
    if is_production:
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", DEV_SECRET_KEY):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
    elif app.config.get("SECRET_KEY") == DEV_SECRET_KEY:
        app.logger.warning("SECRET_KEY not set; using the development default. Tokens are NOT secure.")

    init_db(app)
    init_tokens(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    engine = app.extensions["sqlalchemy_engine"]
    if not is_production and str(app.config["DATABASE_URL"]).startswith("sqlite"):
        # Local development: create missing tables instead of requiring alembic.
        Base.metadata.create_all(bind=engine)

    # Schema health (lean): log tables the code expects but the DB lacks.
    try:
        insp = sa_inspect(engine)
        missing = [name for name in Base.metadata.tables if not insp.has_table(name)]
        if missing:
            app.logger.error("DB schema out of date; run `alembic upgrade head`. Missing tables: %s", ", ".join(missing))
    except SQLAlchemyError:
        app.logger.exception("Schema health check failed")

    api_prefix = app.config["API_PREFIX"]
    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix=api_prefix)
    app.register_blueprint(updates_bp, url_prefix=api_prefix)
    app.register_blueprint(donations_bp, url_prefix=api_prefix)
    app.register_blueprint(markers_bp, url_prefix=api_prefix)
    app.register_blueprint(image_groups_bp, url_prefix=api_prefix)

    @app.before_request
    def _assign_request_id():
        g.request_id = uuid.uuid4().hex
        g.current_admin = None
        g.current_admin_id = None

    @app.after_request
    def _echo_request_id(response):
        rid = getattr(g, "request_id", None)
        if rid:
            response.headers["X-Request-ID"] = rid
        return response

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(LinogError)
    def _err_linog(e: LinogError):  # type: ignore[no-redef]
        if e.status_code >= 500:
            app.logger.error("%s (request_id=%s)", e, getattr(g, "request_id", None))
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _err_http(e: HTTPException):  # type: ignore[no-redef]
        if e.code == 413:
            return jsonify({"error": "Request body too large."}), 413
        return jsonify({"error": e.name}), e.code

    @app.errorhandler(SQLAlchemyError)
    def _err_store(e: SQLAlchemyError):  # type: ignore[no-redef]
        # Full detail goes to the server log only.
        app.logger.exception("Store error (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(Exception)
    def _err_500(e: Exception):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"error": "Internal server error"}), 500

    logger.info("create_app() complete; app ready to serve")

    return app
