"""
Upload validators.

Images are checked for size, extension, declared MIME type and decodable
content (via Pillow).
"""

import logging
import os
from typing import Optional, Set, Tuple

from django.conf import settings
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


# Allowed extensions for images
ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}

# Allowed MIME types for images
ALLOWED_IMAGE_MIME_TYPES = {
    'image/jpeg', 'image/png', 'image/gif', 'image/webp',
}


def validate_image_upload(
    file,
    max_size: Optional[int] = None,
    allowed_extensions: Optional[Set[str]] = None,
    allowed_mime_types: Optional[Set[str]] = None,
    check_content: bool = True
) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded image.

    Checks:
    - File size (MAX_IMAGE_UPLOAD_SIZE by default)
    - File extension
    - MIME type from the upload header
    - That Pillow can identify the content as an image

    Args:
        file: The uploaded file object
        max_size: Maximum file size in bytes (overrides the setting)
        allowed_extensions: Set of allowed extensions (overrides default)
        allowed_mime_types: Set of allowed MIME types (overrides default)
        check_content: Whether to open the content with Pillow

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not file:
        return False, "No file was provided"

    if max_size is None:
        max_size = settings.MAX_IMAGE_UPLOAD_SIZE
    if allowed_extensions is None:
        allowed_extensions = ALLOWED_IMAGE_EXTENSIONS
    if allowed_mime_types is None:
        allowed_mime_types = ALLOWED_IMAGE_MIME_TYPES

    # Check file size
    file_size = file.size if hasattr(file, 'size') else len(file.read())
    if hasattr(file, 'seek'):
        file.seek(0)

    if file_size > max_size:
        max_mb = max_size / (1024 * 1024)
        return False, f"File size exceeds maximum of {max_mb:.1f}MB"

    # Check extension
    filename = getattr(file, 'name', '') or ''
    ext = os.path.splitext(filename.lower())[1]
    if ext not in allowed_extensions:
        return False, f"File extension '{ext}' not allowed. Allowed: {', '.join(sorted(allowed_extensions))}"

    # Check MIME type from header
    content_type = getattr(file, 'content_type', None)
    if content_type and content_type not in allowed_mime_types:
        return False, f"File type '{content_type}' not allowed"

    if check_content:
        try:
            with Image.open(file) as image:
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            logger.warning(f"Rejected upload {filename!r}: {e}")
            return False, "Uploaded file is not a valid image"
        finally:
            if hasattr(file, 'seek'):
                file.seek(0)

    return True, None
