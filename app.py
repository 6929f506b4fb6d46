# backend/app.py

from flask import Flask
from services.firebase import init_firebase, fetch_instructors_snapshot
from services.rooms import fetch_rooms
from routes.api import api_bp
from services.consumption import DEFAULT_SCALE_FACTOR, DEFAULT_TARIFF_PER_KWH
from services.duration import DEFAULT_SESSION_HOURS, DurationStrategy
from services.engine import EnergyEngine
from services.session_tracker import SnapshotTracker
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def env_float(name, default):
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return float(val.strip())
    except ValueError:
        print(f"WARNING: {name}={val!r} is not a number, using {default}")
        return default


def env_strategy(name, default):
    val = os.getenv(name, default)
    try:
        return DurationStrategy(val.strip().lower())
    except ValueError:
        print(f"WARNING: Unknown {name}={val!r}, using {default}")
        return DurationStrategy(default)


def build_engine(config):
    return EnergyEngine(
        snapshot_loader=fetch_instructors_snapshot,
        rooms_loader=fetch_rooms,
        tariff_per_kwh=config["TARIFF_PER_KWH"],
        scale_factor=config["SCALE_FACTOR"],
        strategy=config["DURATION_STRATEGY"],
        default_hours=config["DEFAULT_SESSION_HOURS"],
    )


def create_app(overrides=None):
    app = Flask(__name__)

    # ===============================
    # Config
    # ===============================
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret")
    app.config["TARIFF_PER_KWH"] = env_float("TARIFF_PER_KWH", DEFAULT_TARIFF_PER_KWH)
    app.config["SCALE_FACTOR"] = env_float("SCALE_FACTOR", DEFAULT_SCALE_FACTOR)
    app.config["DURATION_STRATEGY"] = env_strategy("DURATION_STRATEGY", DurationStrategy.ACCESS_LOGS.value)
    app.config["DEFAULT_SESSION_HOURS"] = env_float("DEFAULT_SESSION_HOURS", DEFAULT_SESSION_HOURS)
    app.config["RECORD_WINDOW_HOURS"] = env_float("RECORD_WINDOW_HOURS", 24.0)
    app.config["SNAPSHOT_INTERVAL"] = env_float("SNAPSHOT_INTERVAL", 30.0)
    app.config["SNAPSHOT_DEBOUNCE"] = env_float("SNAPSHOT_DEBOUNCE", 5.0)
    app.config.update(overrides or {})

    # ===============================
    # Firebase Init + Engine
    # ===============================
    engine = app.config.get("ENGINE")
    if engine is None:
        if not app.config.get("TESTING"):
            init_firebase()
        engine = build_engine(app.config)
    app.extensions["energy_engine"] = engine

    # ===============================
    # Background Snapshot Tracker
    # ===============================
    tracker = build_tracker(app)
    app.extensions["snapshot_tracker"] = tracker
    if not app.config.get("TESTING"):
        tracker.start()

    # ===============================
    # Register Blueprints
    # ===============================
    app.register_blueprint(api_bp, url_prefix="/api")

    # ===============================
    # Health Check
    # ===============================
    @app.route("/health")
    def health():
        return {
            "status": "RUNNING",
            "service": "Classroom Energy Reconciliation Backend",
            "strategy": engine.strategy.value,
        }

    return app


def build_tracker(app):
    """
    Tracker that keeps the engine's snapshot current from its own loader
    """
    engine = app.extensions["energy_engine"]
    return SnapshotTracker(
        engine,
        engine.snapshot_loader or dict,
        interval_s=app.config["SNAPSHOT_INTERVAL"],
        debounce_s=app.config["SNAPSHOT_DEBOUNCE"],
    )


# ===============================
# Render / Local Run
# ===============================
if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
