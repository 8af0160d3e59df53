from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()

DEMO_USERS = [
    ('player1', 'password123'),
    ('player2', 'securepass'),
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    # Import and register blueprints here
    from stuffhappens.routes import main
    flask_app.register_blueprint(main)

    from stuffhappens.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api')

    # Flask-Login user loader
    from stuffhappens.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Not authenticated'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from stuffhappens.services.games.catalog import CardCatalog, load_card_data
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            loaded = CardCatalog().seed(load_card_data(flask_app.config.get('CARD_DATA_PATH')))

            # Seed users
            for username, password in DEMO_USERS:
                user = User(username=username)
                user.set_password(password)
                db.session.add(user)

            db.session.commit()
            print(f'Database has been reset and seeded with {loaded} cards!')

    @click.command('seed-cards')
    def seed_cards_command():
        """Loads the card catalog if it is empty."""
        from stuffhappens.services.games.catalog import CardCatalog, load_card_data
        with flask_app.app_context():
            db.create_all()
            catalog = CardCatalog()
            if catalog.count():
                print('Cards already exist, skipping preload.')
                return
            loaded = catalog.seed(load_card_data(flask_app.config.get('CARD_DATA_PATH')))
            db.session.commit()
            print(f'Preloaded {loaded} cards.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_cards_command)

    return flask_app
