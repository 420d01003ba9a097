"""
Routes package for the Reading Club backend
Centralizes all route blueprints
"""
from .auth import (
    is_authenticated,
    get_current_user,
    require_authentication
)
from .events import events_bp
from .health import health_bp
from .leader_assignments import leader_assignments_bp

__all__ = [
    'events_bp',
    'health_bp',
    'leader_assignments_bp',
    'is_authenticated',
    'get_current_user',
    'require_authentication'
]
