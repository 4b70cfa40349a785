"""
AI writing endpoints - content enhancement and proposal drafting
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from ..auth import get_current_user
from ..models import User
from ..services.ai_service import AINotConfigured, AIService, AIServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])


class EnhanceRequest(BaseModel):
    prompt: Optional[str] = Field(None, validation_alias=AliasChoices("prompt", "instruction"))
    content: str = ""


class EnhanceResponse(BaseModel):
    enhanced_content: str = Field(..., alias="enhancedContent")

    class Config:
        populate_by_name = True


class ProposalDraftRequest(BaseModel):
    calculator_data: dict = Field(
        default_factory=dict, validation_alias=AliasChoices("calculator_data", "calculatorData")
    )
    calculator_type: str = Field(
        "marketing", validation_alias=AliasChoices("calculator_type", "calculatorType")
    )
    client_name: str = Field(..., min_length=1, validation_alias=AliasChoices("client_name", "clientName"))
    client_company: Optional[str] = Field(
        None, validation_alias=AliasChoices("client_company", "clientCompany")
    )
    client_industry: Optional[str] = Field(
        None, validation_alias=AliasChoices("client_industry", "clientIndustry")
    )
    additional_context: Optional[str] = Field(
        None, validation_alias=AliasChoices("additional_context", "additionalContext")
    )


class ProposalDraftResponse(BaseModel):
    content: list[dict]


def get_ai_service() -> AIService:
    return AIService()


@router.post("/enhance", response_model=EnhanceResponse)
async def enhance_content(
    data: EnhanceRequest,
    current_user: User = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    """Rewrite content per the prompt, or draft new copy when content is minimal"""
    try:
        enhanced = await ai.enhance_content(data.content, data.prompt)
    except AINotConfigured as e:
        raise HTTPException(status_code=503, detail="AI service not configured") from e
    except AIServiceError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return EnhanceResponse(enhanced_content=enhanced)


@router.post("/proposal", response_model=ProposalDraftResponse)
async def generate_proposal(
    data: ProposalDraftRequest,
    current_user: User = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    """Draft proposal blocks from the calculator selection and client details"""
    try:
        blocks = await ai.generate_proposal(
            client_name=data.client_name,
            calculator_data=data.calculator_data,
            calculator_type=data.calculator_type,
            client_company=data.client_company,
            client_industry=data.client_industry,
            additional_context=data.additional_context,
        )
    except AINotConfigured as e:
        raise HTTPException(status_code=503, detail="AI service not configured") from e
    except AIServiceError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    logger.info(f"✅ Generated {len(blocks)} proposal blocks for user {current_user.id}")
    return ProposalDraftResponse(content=blocks)
