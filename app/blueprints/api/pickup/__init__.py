"""
Pickup API Module
=================

Student pickup planning API organized by concern:
- schedules.py: Weekly schedule bundle read and whole-week replace
- exceptions.py: Date exceptions (create, update, delete, upcoming)
- notes.py: Day notes (create, update, delete)
- times.py: Effective pickup time for one student or in bulk

Every route needs an authenticated caller. Single-student routes require
full access to the student; the bulk route narrows the requested IDs to
the students the caller may see.
"""

from flask import Blueprint

from app.utils.http import error_response

# Create blueprint here to avoid circular imports
pickup_api = Blueprint("pickup_api", __name__)


# Error handlers
@pickup_api.errorhandler(404)
def not_found(error):
    """Handle 404 errors"""
    return error_response("Resource not found", 404)


@pickup_api.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors"""
    return error_response("Method not allowed", 405)


# Import submodules to register routes (must be after blueprint creation)
from . import exceptions, notes, schedules, times  # noqa: E402

__all__ = ["pickup_api"]
