"""Copy scanner router"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...auth import get_current_user
from ...models import User
from .scanner import Issue, scan_text

router = APIRouter(prefix="/copywriting", tags=["Copywriting"])


class ScanRequest(BaseModel):
    text: str = Field(..., max_length=200_000)


class ScanResponse(BaseModel):
    issues: list[Issue]


@router.post("/scan", response_model=ScanResponse)
async def scan_copy(data: ScanRequest, current_user: User = Depends(get_current_user)):
    """Flag passive voice, weak words, cliches and long sentences"""
    return ScanResponse(issues=scan_text(data.text))
