"""
Database models for the Reading Club backend
Centralizes all SQLAlchemy model creation using factory pattern
"""
from .user import create_user_model
from .reading_event import create_reading_event_model
from .enrollment import create_enrollment_model
from .reading_schedule import create_reading_schedule_model
from .assignment_log import create_assignment_log_model


def init_models(db):
    """
    Initialize all models with the database instance

    Args:
        db: SQLAlchemy database instance

    Returns:
        dict: Dictionary containing all model classes
    """
    User = create_user_model(db)
    ReadingEvent = create_reading_event_model(db)
    EventEnrollment = create_enrollment_model(db)
    ReadingSchedule = create_reading_schedule_model(db)
    LeaderAssignmentLog = create_assignment_log_model(db)

    return {
        'User': User,
        'ReadingEvent': ReadingEvent,
        'EventEnrollment': EventEnrollment,
        'ReadingSchedule': ReadingSchedule,
        'LeaderAssignmentLog': LeaderAssignmentLog,
    }


__all__ = [
    'init_models',
    'create_user_model',
    'create_reading_event_model',
    'create_enrollment_model',
    'create_reading_schedule_model',
    'create_assignment_log_model',
    # Model registry exports
    'model_registry',
    'get_models',
    'get_db'
]

# Import registry for convenience
from .registry import model_registry, get_models, get_db
