"""Supabase Storage service for product photo uploads.

Buckets:
- product-photos: listing photos (public), stored under ``products/``
"""

import logging
import secrets
import time
from typing import List, Optional, Tuple

from flask import current_app

from tekasomba.constants import MAX_PHOTOS

logger = logging.getLogger(__name__)

# Supabase client (lazy initialization)
_supabase_client = None


def get_supabase_client():
    """Get or create Supabase client (lazy initialization)."""
    global _supabase_client

    if _supabase_client is None:
        url = current_app.config.get('SUPABASE_URL')
        key = current_app.config.get('SUPABASE_SERVICE_KEY')

        if not url or not key:
            logger.warning('Supabase credentials not configured. Storage will not work.')
            return None

        try:
            from supabase import create_client
            _supabase_client = create_client(url, key)
            logger.info('Supabase client initialized successfully')
        except Exception as e:
            logger.error(f'Failed to initialize Supabase client: {e}')
            return None

    return _supabase_client


def is_storage_configured() -> bool:
    """Check if Supabase storage is properly configured."""
    return get_supabase_client() is not None


def build_photo_path(file_name: str) -> str:
    """Unique object path: products/<epoch-ms>-<random>.<ext>."""
    ext = file_name.rsplit('.', 1)[-1].lower() if '.' in file_name else 'jpg'
    return f'products/{int(time.time() * 1000)}-{secrets.token_hex(5)}.{ext}'


def upload_file(
    bucket: str,
    path: str,
    file_data: bytes,
    content_type: str = 'image/jpeg'
) -> Tuple[Optional[str], Optional[str]]:
    """Upload a file to Supabase Storage.

    Returns:
        Tuple of (public_url, error_message)
        If successful: (url, None)
        If failed: (None, error_message)
    """
    client = get_supabase_client()

    if client is None:
        return None, 'Storage service not configured'

    try:
        logger.info(f'Uploading file to {bucket}/{path} ({content_type})')

        client.storage.from_(bucket).upload(
            path=path,
            file=file_data,
            file_options={"content-type": content_type}
        )

        public_url = client.storage.from_(bucket).get_public_url(path)

        logger.info(f'File uploaded successfully: {public_url}')
        return public_url, None

    except Exception as e:
        error_msg = str(e)
        logger.error(f'Upload failed: {error_msg}')
        return None, error_msg


def upload_product_photos(photos) -> Tuple[List[str], List[str]]:
    """Upload up to MAX_PHOTOS listing photos.

    ``photos`` is a sequence of (file_data, file_name, content_type).
    A photo that fails to upload is skipped with a warning; the rest go on.

    Returns:
        Tuple of (public_urls in upload order, warnings)
    """
    bucket = current_app.config['PRODUCT_PHOTOS_BUCKET']
    urls = []
    warnings = []

    for file_data, file_name, content_type in list(photos)[:MAX_PHOTOS]:
        url, error = upload_file(bucket, build_photo_path(file_name), file_data, content_type)
        if error:
            logger.warning(f'Skipping photo {file_name}: {error}')
            warnings.append(f'Photo upload failed for {file_name}: {error}')
            continue
        urls.append(url)

    return urls, warnings
