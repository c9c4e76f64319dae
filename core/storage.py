"""
Storage helpers for user-uploaded images.

Paths follow the bucket layout used by the clients:
- opportunity_images/{org_id}/{opportunity_id}-{timestamp_ms}.{ext}
- profile-pictures/{user_id}-{random}.{ext}

Files go through ``default_storage`` so deployments can swap the backend
in settings.
"""

import logging
import os
import secrets
import time
from typing import Optional

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


OPPORTUNITY_IMAGE_PREFIX = 'opportunity_images'
PROFILE_PICTURE_PREFIX = 'profile-pictures'


def _extension(filename: str) -> str:
    ext = os.path.splitext(filename or '')[1].lower().lstrip('.')
    return ext or 'jpg'


def build_opportunity_image_path(org_id, opportunity_id, filename: str) -> str:
    """Storage path for an opportunity image."""
    timestamp_ms = int(time.time() * 1000)
    return f"{OPPORTUNITY_IMAGE_PREFIX}/{org_id}/{opportunity_id}-{timestamp_ms}.{_extension(filename)}"


def build_profile_picture_path(user_id, filename: str) -> str:
    """Storage path for a profile picture."""
    return f"{PROFILE_PICTURE_PREFIX}/{user_id}-{secrets.token_hex(6)}.{_extension(filename)}"


def delete_stored_file(path: Optional[str]) -> bool:
    """
    Delete a stored file, logging instead of raising on failure.

    Returns True when the file was removed.
    """
    if not path:
        return False

    try:
        if default_storage.exists(path):
            default_storage.delete(path)
            return True
    except Exception as e:
        logger.warning(f"Failed to delete stored file {path}: {e}")
    return False
