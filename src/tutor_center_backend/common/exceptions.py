"""
This file contains custom, application-specific exceptions.
"""

class PersistenceError(Exception):
    """Raised when the store rejects a write (unreachable, missing document, bad data)."""
    pass

class SubscriptionError(Exception):
    """Raised when a subscription handle is misused, e.g. released twice."""
    pass

class FormValidationError(Exception):
    """Raised when a view's form is submitted with missing or invalid values."""
    pass

class ClassValidationError(Exception):
    """Raised when a class creation payload is missing required fields."""
    pass

class StudentNotFoundError(Exception):
    """Raised when a student ID is not found in the store."""
    pass

class TeacherNotFoundError(Exception):
    """Raised when a teacher ID is not found in the store."""
    pass

class CheckInNotFoundError(Exception):
    """Raised when a check-in ID is not found in the store."""
    pass
