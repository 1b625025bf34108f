from dotenv import load_dotenv
load_dotenv()
from flask import Flask, jsonify, request
from flask_cors import CORS
from sqlalchemy import text
from datetime import datetime
import os
from werkzeug.middleware.proxy_fix import ProxyFix

from extensions import db, limiter
from errors import register_error_handlers
from catalog import catalog_path, load_catalog

app = Flask(__name__)

app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

# -------------------------------
# Client IP resolution
# -------------------------------
# Render (and most PaaS) runs behind a reverse proxy. Without ProxyFix,
# request.remote_addr will often be the proxy IP, collapsing many users into one
# rate-limit bucket. We enable ProxyFix only in production/Render contexts.
if os.getenv("RENDER") or os.getenv("FLASK_ENV") == "production":
    # Trust a single proxy hop (Render's edge proxy)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

_db_url = os.getenv("DATABASE_URL")
if not _db_url:
    if os.getenv("RENDER") == "true":
        raise RuntimeError("DATABASE_URL missing on Render; refusing to use SQLite.")
    _db_url = "sqlite:///coinstorm.db"

if _db_url.startswith("postgres://"):
    _db_url = _db_url.replace("postgres://", "postgresql://", 1)

app.config["SQLALCHEMY_DATABASE_URI"] = _db_url
app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
    "pool_recycle": 300,
    "pool_pre_ping": True,
}
if _db_url.startswith("sqlite"):
    # Concurrent writers wait for the lock instead of failing immediately.
    # Pooled connections are handed to whichever request thread checks them out.
    app.config["SQLALCHEMY_ENGINE_OPTIONS"]["connect_args"] = {"timeout": 15, "check_same_thread": False}

# Rate limiting
# - In production (Render), set RATE_LIMIT_STORAGE_URL to a Redis URL for multi-instance correctness.
# - Defaults to in-memory storage for simplicity.
app.config["RATELIMIT_STORAGE_URI"] = os.getenv("RATE_LIMIT_STORAGE_URL", "memory://")
app.config["RATELIMIT_ENABLED"] = os.getenv("RATELIMIT_ENABLED", "1") == "1"

# Missing catalog is a startup failure, not a per-request error.
app.config["REWARDS_CATALOG"] = load_catalog(catalog_path())

# Initialize extensions
db.init_app(app)
limiter.init_app(app)
CORS(app)
register_error_handlers(app)


# Performance-minded headers (safe defaults)
@app.after_request
def add_perf_headers(resp):
    path = request.path or ""
    if not path.startswith("/static/"):
        # balances are per-session; never cache API responses
        resp.headers.setdefault("Cache-Control", "no-store")
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    return resp


# ==================== HEALTH CHECK ====================

@app.route('/api/health', methods=['GET'])
@limiter.exempt
def health_check():
    try:
        # SQLAlchemy 2.x requires raw SQL to be wrapped in text().
        db.session.execute(text('SELECT 1'))
        return jsonify({
            'success': True,
            'status': 'healthy',
            'timestamp': datetime.utcnow().isoformat(),
            'database': 'connected',
            'rewards': len(app.config["REWARDS_CATALOG"]),
        })
    except Exception as e:
        db.session.rollback()
        app.logger.exception("Health check failed")
        return jsonify({
            'success': False,
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': datetime.utcnow().isoformat()
        }), 500


# ==================== FEATURE MODULES ====================
# Model imports register tables on db.Model before create_all().
from models_sessions import GameSession  # noqa: F401
from models_ads import AdToken  # noqa: F401
from models_redemptions import Redemption  # noqa: F401
from models_admin import AdminToken  # noqa: F401

from sessions import sessions_api
from ads import ads_api
from streaks import streaks_api
from redemptions import redemptions_api
from admin_rewards import AdminAuthService, _admin_key, admin_rewards

app.extensions["admin_auth"] = AdminAuthService(_admin_key())

app.register_blueprint(sessions_api)
app.register_blueprint(ads_api)
app.register_blueprint(streaks_api)
app.register_blueprint(redemptions_api)
app.register_blueprint(admin_rewards)


def init_db():
    # Fresh schema only; there is no in-place upgrade path for older databases.
    db.create_all()



with app.app_context():
    init_db()

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    print("=" * 60)
    print("CoinStorm Rewards API")
    print("=" * 60)
    print(f"Database: {_db_url.split('@')[-1]}")
    print(f"Rewards catalog: {catalog_path()} ({len(app.config['REWARDS_CATALOG'])} rewards)")
    print(f"Admin login: POST http://localhost:{port}/api/admin/login")
    print("=" * 60)

    app.run(host='0.0.0.0', port=port, debug=debug)
