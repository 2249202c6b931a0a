import os
import logging
from flask import Flask, request, redirect, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()

logger = logging.getLogger(__name__)

API_PREFIXES = ('auth', 'readings', 'analytics', 'dashboard', 'admin')


def create_app(test_config=None):
    app = Flask(__name__)

    is_production = os.getenv('FLASK_ENV') == 'production'

    # Require SECRET_KEY, no insecure fallback
    secret_key = os.getenv('SECRET_KEY')
    if not secret_key:
        raise RuntimeError('SECRET_KEY environment variable is required')
    app.config['SECRET_KEY'] = secret_key

    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        raise RuntimeError('DATABASE_URL environment variable is required')

    # In production, require PostgreSQL
    if is_production and not database_url.startswith('postgresql'):
        raise RuntimeError(
            'HIPAA requires PostgreSQL in production. '
            'DATABASE_URL must start with postgresql://'
        )

    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }
    app.config['AUDIT_LOG_FILE'] = os.getenv('AUDIT_LOG_FILE', 'logs/audit.log')
    app.config['RATE_LIMIT_ENABLED'] = os.getenv('RATE_LIMIT_ENABLED', 'true').lower() != 'false'

    # Request size limit (1 MB)
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024

    if test_config:
        app.config.update(test_config)

    db.init_app(app)
    migrate.init_app(app, db)

    # CORS: restrict origins
    allowed_origins = os.getenv('ALLOWED_ORIGINS', '')
    if allowed_origins:
        origins_list = [o.strip() for o in allowed_origins.split(',') if o.strip()]
    elif is_production:
        raise RuntimeError(
            'ALLOWED_ORIGINS environment variable is required in production'
        )
    else:
        # Development: allow localhost variants
        origins_list = [
            'http://localhost:*',
            'http://127.0.0.1:*',
        ]

    CORS(app, resources={
        rf"/{prefix}/*": {"origins": origins_list} for prefix in API_PREFIXES
    })

    # Redirect HTTP to HTTPS in production
    if is_production:
        @app.before_request
        def enforce_https():
            if not request.is_secure and request.headers.get('X-Forwarded-Proto', 'http') != 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Referrer-Policy'] = 'no-referrer'
        if is_production or request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    # JSON bodies only on writes
    @app.before_request
    def validate_content_type():
        if request.method in ('POST', 'PUT') and request.path != '/health':
            content_type = request.content_type or ''
            if 'application/json' not in content_type:
                return jsonify({'error': 'Content-Type must be application/json'}), 415

    from bpmonitor.utils.audit_logger import setup_audit_logging
    setup_audit_logging(app)

    from bpmonitor.routes.account import account_bp
    from bpmonitor.routes.readings import readings_bp
    from bpmonitor.routes.analytics import analytics_bp
    from bpmonitor.routes.dashboard import dashboard_bp
    from bpmonitor.routes.admin import admin_bp

    app.register_blueprint(account_bp, url_prefix='/auth')
    app.register_blueprint(readings_bp, url_prefix='/readings')
    app.register_blueprint(analytics_bp, url_prefix='/analytics')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    @app.route('/health')
    def health():
        return {'status': 'healthy'}, 200

    @app.cli.command('cleanup-revoked-tokens')
    def cleanup_revoked_tokens():
        """Remove expired revoked token entries."""
        from bpmonitor.models.revoked_token import RevokedToken
        count = RevokedToken.cleanup_expired()
        print(f'Removed {count} expired revoked token(s).')

    @app.cli.command('cleanup-rate-limits')
    def cleanup_rate_limits():
        """Remove rate limit entries older than 5 minutes."""
        from bpmonitor.models.rate_limit_entry import RateLimitEntry
        count = RateLimitEntry.cleanup_older_than(300)
        print(f'Removed {count} old rate limit entry/entries.')

    logger.info('BP Monitor app created (production=%s)', is_production)
    return app
