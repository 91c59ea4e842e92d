"""
Image storage on Cloudflare R2.

Objects are private; the database keeps the object key and responses carry a
short-lived presigned URL.
"""

import logging
import os
import uuid
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from ..config import (
    ALLOWED_IMAGE_EXTENSIONS,
    MAX_UPLOAD_SIZE,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
)

logger = logging.getLogger(__name__)

PRESIGNED_URL_EXPIRATION = 3600  # 1 hour
UPLOAD_FOLDERS = {"vehicles", "technicians", "profiles"}

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class FileValidationError(ValueError):
    """Upload rejected before it reached storage"""


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


def validate_image(filename: Optional[str], size_bytes: int) -> str:
    """Check an upload against the image rules and return its extension"""
    if not filename or size_bytes == 0:
        raise FileValidationError("Please select a file to upload")

    ext = os.path.splitext(filename)[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise FileValidationError(
            f"Invalid file type. Allowed: {', '.join(ALLOWED_IMAGE_EXTENSIONS)}"
        )

    if size_bytes > MAX_UPLOAD_SIZE:
        raise FileValidationError(
            f"File size exceeds {MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit. "
            f"Your file is {size_bytes / (1024 * 1024):.2f}MB."
        )
    return ext


def build_key(folder: str, ext: str) -> str:
    if folder not in UPLOAD_FOLDERS:
        raise FileValidationError(f"Unknown upload folder: {folder}")
    return f"uploads/{folder}/{uuid.uuid4()}{ext}"


async def upload_image(file: UploadFile, folder: str) -> str:
    """Validate and store an image, returning the object key"""
    contents = await file.read()
    ext = validate_image(file.filename, len(contents))
    key = build_key(folder, ext)

    get_r2_client().put_object(
        Bucket=R2_BUCKET_NAME,
        Key=key,
        Body=contents,
        ContentType=CONTENT_TYPES[ext],
    )
    logger.info(f"📤 Uploaded {file.filename} to {key} ({len(contents)} bytes)")
    return key


def delete_file(key: Optional[str]) -> bool:
    """Delete an object; False when there was nothing to delete or R2 refused"""
    if not key:
        return False
    try:
        get_r2_client().delete_object(Bucket=R2_BUCKET_NAME, Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Failed to delete {key}: {e}")
        return False
    logger.info(f"🗑️ Deleted {key}")
    return True


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
    """Generate a presigned URL for accessing a private object in R2."""
    return get_r2_client().generate_presigned_url(
        "get_object",
        Params={"Bucket": R2_BUCKET_NAME, "Key": key, "ResponseContentDisposition": "inline"},
        ExpiresIn=expiration,
    )


def image_url(key: Optional[str]) -> Optional[str]:
    """Presigned URL for a stored key, or None when there is no image"""
    if not key or not R2_ACCESS_KEY_ID:
        return None
    return generate_presigned_url(key)
