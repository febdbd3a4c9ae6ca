# Flask Application Factory
import logging
import sys
from pathlib import Path

from flask import Flask, jsonify
from flask_login import LoginManager

from landrental.config import Config
from landrental.models import db, User

logger = logging.getLogger(__name__)

login_manager = LoginManager()

DEMO_PASSWORD = 'demo123'

DEMO_USERS = [
    {
        'name': 'Demo Landowner',
        'email': 'landowner@demo.com',
        'phone': '9876543210',
        'user_type': 'landowner',
        'city': 'Kottayam',
        'state': 'Kerala',
    },
    {
        'name': 'Demo Farmer',
        'email': 'farmer@demo.com',
        'phone': '9876543211',
        'user_type': 'farmer',
        'city': 'Palakkad',
        'state': 'Kerala',
        'farming_experience': 8,
        'preferred_crops': ['rice', 'banana'],
    },
]


@login_manager.request_loader
def load_user_from_request(request):
    """Resolve 'Authorization: Bearer <token>' to an active user"""
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    token = header[len('Bearer '):].strip()
    if not token:
        return None
    return User.verify_auth_token(token)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'message': 'Not authorized, please log in'}), 401


def seed_demo_users_if_needed():
    """Create the demo landowner and farmer accounts if they don't exist."""
    result = {'created': [], 'skipped': [], 'errors': []}

    for user_data in DEMO_USERS:
        if User.query.filter_by(email=user_data['email']).first():
            result['skipped'].append(user_data['email'])
            continue
        user = User(is_active=True, **user_data)
        user.set_password(DEMO_PASSWORD)
        db.session.add(user)
        result['created'].append(user_data['email'])

    if not result['created']:
        logger.info('Demo users already exist, skipping seeding')
        return result

    try:
        db.session.commit()
        logger.info('Seeded %d demo users: %s', len(result['created']), ', '.join(result['created']))
    except Exception as e:
        db.session.rollback()
        result['errors'].append(str(e))
        # Don't fail app startup if seeding fails
        logger.exception('Could not seed demo users')

    return result


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    package_logger = logging.getLogger('landrental')
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s'))
        package_logger.addHandler(handler)
    app.logger.setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # Create upload directories and the SQLite folder
    Path(app.config['UPLOAD_FOLDER']).mkdir(parents=True, exist_ok=True)
    Path(app.config['AGREEMENTS_FOLDER']).mkdir(parents=True, exist_ok=True)
    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    if database_uri.startswith('sqlite:///'):
        Path(database_uri[len('sqlite:///'):]).parent.mkdir(parents=True, exist_ok=True)

    from landrental.errors import register_error_handlers
    register_error_handlers(app)

    # Create database tables and seed users
    with app.app_context():
        logger.info('Initializing database...')
        db.create_all()
        if app.config.get('SEED_DEMO_USERS'):
            seed_demo_users_if_needed()

    # Register blueprints
    from landrental.routes.main import main_bp
    from landrental.routes.auth import auth_bp
    from landrental.routes.user import user_bp
    from landrental.routes.land import land_bp
    from landrental.routes.agreement import agreement_bp
    from landrental.routes.payment import payment_bp
    from landrental.routes.chat import chat_bp
    from landrental.routes.chatbot import chatbot_bp
    app.register_blueprint(main_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(user_bp, url_prefix='/api/user')
    app.register_blueprint(land_bp, url_prefix='/api/land')
    app.register_blueprint(agreement_bp, url_prefix='/api/agreement')
    app.register_blueprint(payment_bp, url_prefix='/api/payment')
    app.register_blueprint(chat_bp, url_prefix='/api/chat')
    app.register_blueprint(chatbot_bp, url_prefix='/api/chatbot')

    return app
