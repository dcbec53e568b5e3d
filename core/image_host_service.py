"""
Cloudinary Image Hosting Service.
Uploads product images and returns their public URL.

Cloudinary Upload API Documentation:
https://cloudinary.com/documentation/image_upload_api_reference
"""
import requests
import logging
from typing import Optional
from django.conf import settings

logger = logging.getLogger(__name__)


class ImageUploadError(Exception):
    """Raised when an image cannot be uploaded to the image host."""
    pass


class CloudinaryImageService:
    """
    Service for unsigned image uploads to Cloudinary.

    Uploads go through an unsigned upload preset, so no API secret is
    held by the backend. Only used when a farmer creates or updates a product.
    """

    UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

    def __init__(self):
        """Initialize Cloudinary service with credentials from settings."""
        self.cloud_name = getattr(settings, 'CLOUDINARY_CLOUD_NAME', '')
        self.upload_preset = getattr(settings, 'CLOUDINARY_UPLOAD_PRESET', '')
        self.default_folder = getattr(settings, 'CLOUDINARY_DEFAULT_FOLDER', 'products')
        self.timeout = getattr(settings, 'IMAGE_UPLOAD_TIMEOUT', 30)

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.upload_preset)

    def upload_image(self, file, folder: Optional[str] = None) -> str:
        """
        Upload an image file to Cloudinary.

        Args:
            file: File-like object (e.g. an UploadedFile from request.FILES)
            folder: Optional folder hint on the image host (default: 'products')

        Returns:
            str: The secure URL of the uploaded image

        Raises:
            ImageUploadError: if configuration is missing or the upload fails
        """
        if not self.is_configured:
            raise ImageUploadError(
                "Cloudinary configuration is missing. Please check your environment variables."
            )

        folder = folder or self.default_folder
        url = self.UPLOAD_URL.format(cloud_name=self.cloud_name)
        filename = getattr(file, 'name', 'upload')

        try:
            response = requests.post(
                url,
                data={
                    'upload_preset': self.upload_preset,
                    'folder': folder,
                },
                files={'file': (filename, file)},
                timeout=self.timeout
            )
            data = response.json() if response.content else {}

        except requests.exceptions.Timeout:
            logger.error(f"Timeout uploading image {filename} to Cloudinary")
            raise ImageUploadError("Failed to upload image: Request timeout")

        except requests.exceptions.RequestException as e:
            logger.error(f"Network error uploading image {filename}: {str(e)}")
            raise ImageUploadError(f"Failed to upload image: Network error: {str(e)}")

        except ValueError:
            logger.error(
                f"Cloudinary returned a non-JSON response for {filename}. "
                f"Status: {response.status_code}"
            )
            raise ImageUploadError("Failed to upload image: Invalid response from image host")

        if 'error' in data:
            message = data['error'].get('message', 'Unknown error')
            logger.error(f"Cloudinary rejected upload of {filename}: {message}")
            raise ImageUploadError(f"Failed to upload image: {message}")

        secure_url = data.get('secure_url')
        if not secure_url:
            logger.error(
                f"Cloudinary response for {filename} has no secure_url. "
                f"Status: {response.status_code}"
            )
            raise ImageUploadError("Failed to upload image: Unknown error")

        logger.info(f"Uploaded image {filename} to Cloudinary folder '{folder}'")
        return secure_url
