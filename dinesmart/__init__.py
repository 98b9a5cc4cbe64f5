import logging

import click
from flask import Flask, current_app, jsonify, send_from_directory

from .config import Config
from .database import db
from .errors import register_error_handlers
from .security import login_manager


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    db.init_app(app)
    login_manager.init_app(app)
    register_error_handlers(app)

    from .views import admin, auth, customer, seller
    app.register_blueprint(auth.bp)
    app.register_blueprint(customer.bp)
    app.register_blueprint(seller.bp)
    app.register_blueprint(admin.bp)

    @app.get('/')
    def index():
        return jsonify({'message': 'DineSmart API running'})

    @app.get('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)

    register_commands(app)
    return app


def register_commands(app):
    from .seed import seed_admin, seed_demo

    @app.cli.command('init-db')
    def init_db():
        """Create tables and seed the admin account."""
        db.create_all()
        seed_admin()
        click.echo('Database initialised')

    @app.cli.command('seed-demo')
    def seed_demo_command():
        """Load demo users, restaurant and menu."""
        db.create_all()
        seed_demo()
        click.echo('Demo data loaded')
