"""
Email Routes - manual sends through the configured provider
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from ..auth import get_current_user
from ..email_service import EmailDeliveryError, EmailNotConfigured, send_email
from ..models import User
from ..shared.validators import validate_email
from ..utils.sanitization import sanitize_html, sanitize_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email", tags=["Email"])


class SendEmailRequest(BaseModel):
    to: Union[str, list[str]]
    subject: str = Field(..., min_length=1, max_length=300)
    html: str = Field(..., min_length=1)
    text: Optional[str] = None

    @field_validator("to")
    @classmethod
    def check_recipients(cls, value):
        recipients = [value] if isinstance(value, str) else value
        if not recipients:
            raise ValueError("At least one recipient is required")
        normalized = [validate_email(recipient) for recipient in recipients]
        return normalized[0] if isinstance(value, str) else normalized


@router.post("/send")
async def send_custom_email(
    data: SendEmailRequest,
    current_user: User = Depends(get_current_user),
):
    """Send an email (authenticated users only)"""
    logger.info(f"📧 User {current_user.id} sending email '{data.subject}'")
    try:
        result = await send_email(
            to=data.to,
            subject=sanitize_string(data.subject),
            html=sanitize_html(data.html),
            text=data.text,
        )
    except EmailNotConfigured as e:
        raise HTTPException(status_code=503, detail="Email service not configured") from e
    except EmailDeliveryError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {"success": True, "result": result}
