"""
Custom exception classes for the PawFinder application.
"""
from typing import Optional


class PawFinderError(Exception):
    """Base exception for all PawFinder errors."""
    pass


class ValidationError(PawFinderError):
    """Raised when input validation fails."""
    
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class InvalidCoordinate(ValidationError):
    """Raised when a latitude/longitude pair is malformed or out of range."""
    pass


class InvalidCriteria(ValidationError):
    """Raised when a search criteria change requests an out-of-bound value."""
    pass


class FetchFailed(PawFinderError):
    """Raised when pet reports cannot be fetched from the backing store."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


class NotFoundError(PawFinderError):
    """Raised when a requested document does not exist."""
    
    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class StorageError(PawFinderError):
    """Raised when GCS operations fail."""
    pass


class ServiceUnavailableError(PawFinderError):
    """Raised when required service clients are not initialized."""
    
    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"{service_name} service is not available")


class PublishError(PawFinderError):
    """Raised when publishing to Pub/Sub fails."""
    pass
