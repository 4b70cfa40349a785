import logging
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..auth import get_current_user
from ..config import (
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_PUBLIC_BASE_URL,
    R2_SECRET_ACCESS_KEY,
)
from ..models import User
from ..utils.sanitization import strip_control_characters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["Upload"])

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

# Content type -> stored file extension
ALLOWED_CONTENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/svg+xml": "svg",
    "application/pdf": "pdf",
}

DANGEROUS_FILENAME_CHARS = ("..", "/", "\\", "<", ">", ":", '"', "|", "?", "*")


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def storage_configured() -> bool:
    return bool(R2_ACCOUNT_ID and R2_ACCESS_KEY_ID and R2_SECRET_ACCESS_KEY and R2_PUBLIC_BASE_URL)


def public_url(key: str) -> str:
    return f"{R2_PUBLIC_BASE_URL.rstrip('/')}/{key}"


def validate_filename(filename: str) -> str:
    """Reject path traversal and header-breaking characters in a client filename"""
    filename = strip_control_characters(filename).strip()
    for char in DANGEROUS_FILENAME_CHARS:
        if char in filename:
            logger.warning(f"❌ Dangerous character '{char}' detected in filename: '{filename}'")
            raise HTTPException(
                status_code=400, detail=f"Invalid filename - contains dangerous character '{char}'"
            )
    if len(filename) > 255:
        raise HTTPException(status_code=400, detail="Filename too long - maximum 255 characters")
    return filename


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
):
    """Upload an image or PDF to R2 and return its public URL."""
    logger.info(f"📤 Uploading file for user {current_user.id}: {file.filename}")

    extension = ALLOWED_CONTENT_TYPES.get(file.content_type or "")
    if extension is None:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only PNG, JPEG, WebP, GIF, SVG images and PDF files are allowed.",
        )
    if file.filename:
        validate_filename(file.filename)

    contents = await file.read()
    if len(contents) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds 10MB limit. Your file is {len(contents) / (1024 * 1024):.2f}MB.",
        )
    if not contents:
        raise HTTPException(status_code=400, detail="File is empty")

    if not storage_configured():
        logger.error("❌ File storage not configured - R2 credentials missing")
        raise HTTPException(status_code=503, detail="File storage not configured")

    key = f"uploads/{current_user.id}/{uuid.uuid4()}.{extension}"
    put_object_params = {
        "Bucket": R2_BUCKET_NAME,
        "Key": key,
        "Body": contents,
        "ContentType": file.content_type,
    }
    if extension in ("svg", "pdf"):
        put_object_params["ContentDisposition"] = "inline"

    try:
        get_r2_client().put_object(**put_object_params)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Upload failed: {e}")
        raise HTTPException(status_code=502, detail="Upload failed") from e

    logger.info(f"✅ Uploaded {key} ({len(contents)} bytes)")
    return {"url": public_url(key), "key": key}
