"""
Shared Flask extension objects

Created unbound here and attached to the app in create_app() through
init_app(), so models, routes and services can import them without an app.
"""
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()

# Per client address. Storage, default limits and the on/off switch are
# read from the RATELIMIT_* keys of the app config.
limiter = Limiter(key_func=get_remote_address, strategy='fixed-window')
