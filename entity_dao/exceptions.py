"""
Custom exceptions for the data-access layer.

Database execution failures are not wrapped: SQLAlchemy exceptions such as
IntegrityError or OperationalError reach the caller unchanged.
"""

class DaoError(Exception):
    """Base exception for data-access errors."""
    pass

class ConfigurationError(DaoError):
    """Raised when an entity type, property or key generator is not set up correctly."""
    pass

class QueryError(DaoError):
    """Raised when a query handle is used in a way its state does not allow."""
    pass
