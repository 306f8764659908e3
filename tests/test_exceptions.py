"""
Tests for custom exception classes.
"""
from pawfinder.exceptions import (
    PawFinderError, ValidationError, InvalidCoordinate, InvalidCriteria,
    FetchFailed, NotFoundError, StorageError, ServiceUnavailableError, PublishError
)


def test_base_exception():
    """Test base PawFinderError exception."""
    error = PawFinderError("Test error")
    assert str(error) == "Test error"
    assert isinstance(error, Exception)


def test_validation_error():
    """Test ValidationError with field and message."""
    error = ValidationError("email", "Invalid email format")
    assert error.field == "email"
    assert error.message == "Invalid email format"
    assert str(error) == "email: Invalid email format"
    assert isinstance(error, PawFinderError)


def test_invalid_coordinate():
    """Test InvalidCoordinate is a ValidationError."""
    error = InvalidCoordinate("latitude", "Latitude must be between -90 and 90, got 95")
    assert error.field == "latitude"
    assert isinstance(error, ValidationError)


def test_invalid_criteria():
    """Test InvalidCriteria is a ValidationError."""
    error = InvalidCriteria("radius_km", "Radius must be between 1 and 50 km, got 0")
    assert str(error).startswith("radius_km: ")
    assert isinstance(error, ValidationError)


def test_fetch_failed():
    """Test FetchFailed keeps its cause."""
    cause = TimeoutError("deadline exceeded")
    error = FetchFailed("Could not load lost pets", cause=cause)
    assert str(error) == "Could not load lost pets"
    assert error.cause is cause
    assert FetchFailed("x").cause is None


def test_not_found_error():
    """Test NotFoundError message."""
    error = NotFoundError("Pet", "abc123")
    assert error.resource == "Pet"
    assert error.identifier == "abc123"
    assert str(error) == "Pet abc123 not found"


def test_storage_error():
    """Test StorageError exception."""
    error = StorageError("Failed to upload file")
    assert str(error) == "Failed to upload file"
    assert isinstance(error, PawFinderError)


def test_service_unavailable_error():
    """Test ServiceUnavailableError with service name."""
    error = ServiceUnavailableError("Firestore")
    assert error.service_name == "Firestore"
    assert str(error) == "Firestore service is not available"


def test_publish_error():
    """Test PublishError exception."""
    error = PublishError("Pub/Sub publish failed")
    assert str(error) == "Pub/Sub publish failed"
    assert isinstance(error, PawFinderError)
