"""Share link router - FastAPI endpoints for share links"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..proposals.schemas import SharedProposalResponse
from .schemas import LinkCreate, LinkCreated, LinkOut, LinkUpdate
from .service import LinkService

router = APIRouter(prefix="/links", tags=["Links"])


def get_link_service(db: Session = Depends(get_db)) -> LinkService:
    """Dependency injection for LinkService"""
    return LinkService(db)


@router.post("", response_model=LinkCreated, status_code=201)
async def create_link(
    data: LinkCreate,
    current_user: User = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
):
    """Create a share link for a proposal or contract"""
    return service.create_link(data, current_user)


@router.get("/proposal/{proposal_id}", response_model=list[LinkOut])
async def list_links(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
):
    """List the share links of a proposal"""
    return service.list_links(proposal_id, current_user)


@router.patch("/{link_id}", response_model=LinkOut)
async def update_link(
    link_id: int,
    data: LinkUpdate,
    current_user: User = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
):
    return service.update_link(link_id, data, current_user)


@router.delete("/{link_id}")
async def revoke_link(
    link_id: int,
    current_user: User = Depends(get_current_user),
    service: LinkService = Depends(get_link_service),
):
    """Deactivate a share link"""
    return service.deactivate_link(link_id, current_user)


# ============================================================================
# PUBLIC ACCESS (no authentication)
# ============================================================================


@router.get("/share/{token}", response_model=SharedProposalResponse)
async def open_shared_proposal(
    token: str,
    password: Optional[str] = Query(None),
    service: LinkService = Depends(get_link_service),
):
    """Open a proposal through its share link"""
    return service.open_shared_proposal(token, password)
