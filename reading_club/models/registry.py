"""
Model registry

Model classes are built by factory functions at app start-up (see
init_models), so code cannot import them directly. The registry stores
them on app.extensions and hands them out per application context.

Usage:
    from reading_club.models import get_db, get_models

    ReadingEvent = get_models()['ReadingEvent']
    event = get_db().session.get(ReadingEvent, event_id)
"""
from typing import Any, Dict

from flask import current_app

from reading_club.error_handlers.exceptions import ConfigurationException

# Models the leader assignment services look up by name
REQUIRED_MODELS = (
    'User',
    'ReadingEvent',
    'EventEnrollment',
    'ReadingSchedule',
    'LeaderAssignmentLog',
)


class ModelRegistry:
    """Flask extension holding the model classes created for one app"""

    def __init__(self, app=None):
        self.models: Dict[str, Any] = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['models'] = self

    def register(self, models_dict: Dict[str, Any]):
        """
        Store the models built by init_models

        Raises:
            ConfigurationException: if a model the services need is missing
        """
        missing = [name for name in REQUIRED_MODELS if name not in models_dict]
        if missing:
            raise ConfigurationException(f"Models not registered: {', '.join(missing)}")
        self.models = dict(models_dict)


model_registry = ModelRegistry()


def get_models() -> Dict[str, Any]:
    """Models of the current app, keyed by class name"""
    registry = current_app.extensions.get('models')
    if registry is None or not registry.models:
        raise RuntimeError('Models are not registered; create the app with create_app()')
    return registry.models


def get_db():
    """Flask-SQLAlchemy instance of the current app"""
    return current_app.extensions['sqlalchemy']
