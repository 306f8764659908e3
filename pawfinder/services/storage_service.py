"""
Storage service for pet and profile photos in Google Cloud Storage.
"""
import logging
from typing import Optional

from ..config import PET_PHOTOS_PREFIX, PROFILE_PHOTOS_PREFIX
from ..exceptions import StorageError, ServiceUnavailableError
from ..utils.url_helpers import split_gs_url
from .. import gcp_clients

logger = logging.getLogger(__name__)


def _extension(image_file) -> str:
    filename = getattr(image_file, "filename", "") or ""
    return filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'jpg'


class StorageService:
    """Service for managing image uploads to GCS."""
    
    def __init__(self, storage_client=None, bucket_name: str = ""):
        """
        Initialize storage service.
        
        Args:
            storage_client: GCS storage client (or None to use global client)
            bucket_name: Name of the GCS bucket
        """
        self.storage_client = storage_client or gcp_clients.storage_client
        self.bucket_name = bucket_name or gcp_clients.BUCKET_NAME
    
    def upload_image(self, image_file, path: str) -> str:
        """
        Upload image file to GCS.
        
        Args:
            image_file: File object to upload
            path: Object path inside the bucket
            
        Returns:
            str: GCS URL of uploaded image (gs://bucket/path format)
            
        Raises:
            ServiceUnavailableError: If storage client is not initialized
            StorageError: If upload fails
        """
        if not self.storage_client:
            raise ServiceUnavailableError("Storage")
        
        try:
            bucket = self.storage_client.bucket(self.bucket_name)
            blob = bucket.blob(path)
            blob.upload_from_file(image_file, content_type=getattr(image_file, "content_type", None) or "image/jpeg")
            
            image_url = f"gs://{self.bucket_name}/{path}"
            logger.info(f"Successfully uploaded image to {image_url}")
            return image_url
            
        except Exception as e:
            logger.error(f"Failed to upload image to GCS: {e}")
            raise StorageError(f"Failed to upload image: {str(e)}")
    
    def upload_pet_images(self, image_files: list, pet_id: str) -> list[str]:
        """
        Upload a report's photos as pet_photos/<pet_id>/image_<n>.<ext>.
        
        Returns:
            list: GCS URLs in upload order
        """
        urls = []
        for index, image_file in enumerate(image_files):
            path = f"{PET_PHOTOS_PREFIX}/{pet_id}/image_{index}.{_extension(image_file)}"
            urls.append(self.upload_image(image_file, path))
        return urls
    
    def upload_sighting_image(self, image_file, pet_id: str, sighting_id: str) -> str:
        path = f"{PET_PHOTOS_PREFIX}/{pet_id}/sightings/{sighting_id}.{_extension(image_file)}"
        return self.upload_image(image_file, path)
    
    def upload_profile_image(self, image_file, user_id: str) -> str:
        """Upload (and replace) a user's profile photo."""
        path = f"{PROFILE_PHOTOS_PREFIX}/{user_id}/profile.{_extension(image_file)}"
        return self.upload_image(image_file, path)
    
    def delete_image(self, image_url: str) -> bool:
        """
        Delete image from GCS.
        
        Args:
            image_url: GCS URL of image to delete (gs://bucket/filename format)
            
        Returns:
            bool: True if deleted successfully, False otherwise
            
        Raises:
            ServiceUnavailableError: If storage client is not initialized
        """
        if not self.storage_client:
            raise ServiceUnavailableError("Storage")
        
        parsed = split_gs_url(image_url)
        if not parsed:
            logger.warning(f"Invalid GCS URL format: {image_url}")
            return False
        
        bucket_name, blob_name = parsed
        try:
            self.storage_client.bucket(bucket_name).blob(blob_name).delete()
            logger.info(f"Successfully deleted image: {image_url}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete image {image_url}: {e}")
            return False
