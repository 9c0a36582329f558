# /app/__init__.py
import os
import logging
from pathlib import Path
from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from config import ProductionConfig
from services.config_service import ConfigManager
from services.headers import merge_aliases
from app.routes import main_routes_bp, files_bp


load_dotenv()

# Environment variables that override config classes and config.json
ENV_OVERRIDES = ("UPLOAD_FOLDER", "DELETE_PASS", "ALLOWED_ORIGINS")


def init_sentry():
    """Initialize Sentry error tracking if SENTRY_DSN is configured."""
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    environment = os.getenv("FLASK_ENV") or os.getenv("ENV") or "development"

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=environment,
        integrations=[
            FlaskIntegration(),
            LoggingIntegration(
                level=logging.INFO,       # Capture info and above as breadcrumbs
                event_level=logging.ERROR  # Send errors and above as events
            ),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        attach_stacktrace=True,
        debug=os.getenv("SENTRY_DEBUG", "0") == "1",
    )
    logging.info(f"Sentry initialized for environment: {environment}")


def create_app(config_name: str = "", overrides: dict | None = None):
    init_sentry()

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(ProductionConfig)

    app.secret_key = os.getenv("FLASK_SECRET", os.urandom(24))

    if config_name:
        app.config.from_object(f"config.{config_name}Config")

    # Merge JSON config (upper-case keys only, like from_object)
    config_manager = ConfigManager(os.getenv("CONFIG_PATH", "config.json"))
    if config_manager.last_load_error:
        logging.warning(f"Ignoring {config_manager.resolved_path}: {config_manager.last_load_error}")
    app.config.update({k: v for k, v in config_manager.config.items() if k.isupper()})

    for key in ENV_OVERRIDES:
        if os.getenv(key):
            app.config[key] = os.getenv(key)

    if overrides:
        app.config.update(overrides)

    # Logging (basic)
    logging.basicConfig(
        level=logging.DEBUG if app.config.get("DEBUG") else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # prevent duplicate handlers in some reload scenarios
    )

    # Upload folder: absolute as-is, relative anchored to the instance folder
    upload_folder = Path(app.config["UPLOAD_FOLDER"])
    if not upload_folder.is_absolute():
        upload_folder = (Path(app.instance_path) / upload_folder).resolve()
    upload_folder.mkdir(parents=True, exist_ok=True)
    app.config["UPLOAD_FOLDER"] = str(upload_folder)
    logging.debug("upload_folder=%s", app.config["UPLOAD_FOLDER"])

    app.config["HEADER_ALIASES"] = merge_aliases(config_manager.get("header_aliases"))

    app.json.sort_keys = False

    origins = [o.strip() for o in str(app.config.get("ALLOWED_ORIGINS") or "*").split(",") if o.strip()]
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        # a bare "*" is sent as-is rather than echoing the request origin
        send_wildcard="*" in origins,
        methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Admin-Pass"],
    )

    # Blueprints
    app.register_blueprint(main_routes_bp)
    app.register_blueprint(files_bp)

    return app
