"""
Tests for photo uploads to Cloud Storage.
"""
import io
from unittest.mock import MagicMock, patch

import pytest
from werkzeug.datastructures import FileStorage

from pawfinder.exceptions import ServiceUnavailableError, StorageError
from pawfinder.services.storage_service import StorageService


@pytest.fixture
def mock_storage():
    return MagicMock()


@pytest.fixture
def service(mock_storage):
    return StorageService(storage_client=mock_storage, bucket_name="test-bucket")


def image(name="photo.png", content_type="image/png"):
    return FileStorage(io.BytesIO(b"img"), filename=name, content_type=content_type)


class TestUploads:
    """Tests for StorageService uploads."""
    
    def test_upload_image(self, service, mock_storage):
        file = image()
        
        url = service.upload_image(file, "pet_photos/p1/image_0.png")
        
        assert url == "gs://test-bucket/pet_photos/p1/image_0.png"
        mock_storage.bucket.assert_called_with("test-bucket")
        mock_storage.bucket.return_value.blob.assert_called_with("pet_photos/p1/image_0.png")
        mock_storage.bucket.return_value.blob.return_value.upload_from_file.assert_called_once_with(
            file, content_type="image/png"
        )
    
    def test_upload_pet_images(self, service):
        """Test report photos are numbered in upload order."""
        urls = service.upload_pet_images([image("a.jpg"), image("b.PNG")], "p1")
        assert urls == [
            "gs://test-bucket/pet_photos/p1/image_0.jpg",
            "gs://test-bucket/pet_photos/p1/image_1.png",
        ]
    
    def test_upload_sighting_image(self, service):
        url = service.upload_sighting_image(image("s.jpeg"), "p1", "s1")
        assert url == "gs://test-bucket/pet_photos/p1/sightings/s1.jpeg"
    
    def test_upload_profile_image(self, service):
        url = service.upload_profile_image(image("me.jpg"), "u1")
        assert url == "gs://test-bucket/profile_photos/u1/profile.jpg"
    
    def test_upload_failure(self, service, mock_storage):
        """Test client errors become StorageError."""
        mock_storage.bucket.return_value.blob.return_value.upload_from_file.side_effect = RuntimeError("403")
        with pytest.raises(StorageError) as exc_info:
            service.upload_image(image(), "x.png")
        assert "403" in str(exc_info.value)
    
    def test_client_unavailable(self):
        with patch("pawfinder.gcp_clients.storage_client", None):
            service = StorageService(bucket_name="test-bucket")
        with pytest.raises(ServiceUnavailableError):
            service.upload_image(image(), "x.png")


class TestDeleteImage:
    """Tests for StorageService.delete_image."""
    
    def test_delete(self, service, mock_storage):
        assert service.delete_image("gs://other-bucket/pet_photos/p1/image_0.jpg") is True
        mock_storage.bucket.assert_called_with("other-bucket")
        mock_storage.bucket.return_value.blob.assert_called_with("pet_photos/p1/image_0.jpg")
    
    def test_invalid_url(self, service):
        assert service.delete_image("https://example.com/a.jpg") is False
    
    def test_delete_failure(self, service, mock_storage):
        mock_storage.bucket.return_value.blob.return_value.delete.side_effect = RuntimeError("404")
        assert service.delete_image("gs://test-bucket/a.jpg") is False
