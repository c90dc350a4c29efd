from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from type2live.main import main
    flask_app.register_blueprint(main)

    from type2live.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from type2live.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from type2live.services.terms import seed_default_terms
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            count = seed_default_terms()
            print(f'Database has been reset and seeded with {count} terms!')

    @click.command('load-terms')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def load_terms_command(path):
        """Imports IT terms from a CSV file (display_text,difficulty,category,description)."""
        from type2live.services.terms import import_terms_csv
        with flask_app.app_context():
            created, updated = import_terms_csv(path)
            print(f'Imported terms: {created} created, {updated} updated.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(load_terms_command)

    return flask_app
