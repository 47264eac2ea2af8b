import logging

from flask import Flask
from flask_login import LoginManager
from flask_migrate import Migrate
from models import db, User
from routes import register_blueprints


def create_app(config_object='config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    app.logger.setLevel(getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    Migrate(app, db)

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Register blueprints
    register_blueprints(app)

    return app


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        db.create_all()
    app.run(host='0.0.0.0', port=5005, debug=True)
