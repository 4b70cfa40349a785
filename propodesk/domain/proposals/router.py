"""Proposal router - FastAPI endpoints for proposal operations"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..comments import CommentCreate, CommentListResponse, CommentOut, CommentResolve, CommentService
from .schemas import (
    ProposalCreate,
    ProposalDecision,
    ProposalResponse,
    ProposalSendRequest,
    ProposalSendResponse,
    ProposalStatus,
    ProposalUpdate,
    ProposalVersionCreate,
    ProposalVersionDetail,
    ProposalVersionOut,
)
from .service import ProposalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals", tags=["Proposals"])


def get_proposal_service(db: Session = Depends(get_db)) -> ProposalService:
    """Dependency injection for ProposalService"""
    return ProposalService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ProposalResponse])
async def get_proposals(
    status: Optional[ProposalStatus] = Query(None, description="Filter by status"),
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    """Get all proposals for the current user"""
    return [ProposalResponse.model_validate(p) for p in service.get_proposals(current_user, status)]


@router.post("", response_model=ProposalResponse, status_code=201)
async def create_proposal(
    data: ProposalCreate,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    """Create a draft proposal; calculator totals are computed server-side"""
    return ProposalResponse.model_validate(service.create_proposal(data, current_user))


@router.get("/{proposal_id}", response_model=ProposalResponse)
async def get_proposal(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    return ProposalResponse.model_validate(service.get_proposal(proposal_id, current_user))


@router.patch("/{proposal_id}", response_model=ProposalResponse)
async def update_proposal(
    proposal_id: int,
    data: ProposalUpdate,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    return ProposalResponse.model_validate(service.update_proposal(proposal_id, data, current_user))


@router.delete("/{proposal_id}")
async def delete_proposal(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    return service.delete_proposal(proposal_id, current_user)


# ============================================================================
# VERSIONS
# ============================================================================


@router.post("/{proposal_id}/versions", response_model=ProposalVersionOut, status_code=201)
async def save_version(
    proposal_id: int,
    data: Optional[ProposalVersionCreate] = None,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    """Snapshot the proposal's current title and body"""
    version = service.save_version(proposal_id, data or ProposalVersionCreate(), current_user)
    return ProposalVersionOut.model_validate(version)


@router.get("/{proposal_id}/versions", response_model=list[ProposalVersionOut])
async def list_versions(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    return [ProposalVersionOut.model_validate(v) for v in service.get_versions(proposal_id, current_user)]


@router.get("/{proposal_id}/versions/{version_id}", response_model=ProposalVersionDetail)
async def get_version(
    proposal_id: int,
    version_id: int,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    version = service.get_version(proposal_id, version_id, current_user)
    return ProposalVersionDetail(
        version=ProposalVersionOut.model_validate(version),
        proposal_title=version.proposal.title,
        client_name=version.proposal.client_name,
    )


@router.post("/{proposal_id}/versions/{version_id}/restore", response_model=ProposalResponse)
async def restore_version(
    proposal_id: int,
    version_id: int,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    """Replace the title and body with a saved version"""
    return ProposalResponse.model_validate(service.restore_version(proposal_id, version_id, current_user))


# ============================================================================
# WORKFLOW
# ============================================================================


@router.post("/{proposal_id}/send", response_model=ProposalSendResponse)
async def send_proposal(
    proposal_id: int,
    data: Optional[ProposalSendRequest] = None,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    """Email the client a share link and mark the proposal sent"""
    return await service.send_proposal(proposal_id, data or ProposalSendRequest(), current_user)


@router.post("/{proposal_id}/accept", response_model=ProposalResponse)
async def accept_proposal(
    proposal_id: int,
    data: ProposalDecision,
    service: ProposalService = Depends(get_proposal_service),
):
    """Recipient accepts a viewed proposal (public, token-gated)"""
    return ProposalResponse.model_validate(await service.decide(proposal_id, data, "accept"))


@router.post("/{proposal_id}/reject", response_model=ProposalResponse)
async def reject_proposal(
    proposal_id: int,
    data: ProposalDecision,
    service: ProposalService = Depends(get_proposal_service),
):
    """Recipient rejects a viewed proposal (public, token-gated)"""
    return ProposalResponse.model_validate(await service.decide(proposal_id, data, "reject"))


@router.post("/{proposal_id}/pdf")
async def generate_proposal_pdf(
    proposal_id: int,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    pdf_bytes, filename = await service.generate_pdf(proposal_id, current_user)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================================
# COMMENTS (public: recipients comment through the shared view)
# ============================================================================


@router.post("/{proposal_id}/comments", response_model=CommentOut, status_code=201)
async def add_comment(
    proposal_id: int,
    data: CommentCreate,
    service: ProposalService = Depends(get_proposal_service),
):
    service.get_public_proposal(proposal_id)
    return CommentService.for_proposals(service.db).add_comment(proposal_id, data)


@router.get("/{proposal_id}/comments", response_model=CommentListResponse)
async def list_comments(
    proposal_id: int,
    since: Optional[datetime] = Query(None, description="Only comments created after this time"),
    limit: int = Query(100, ge=1, le=500),
    block_id: Optional[str] = Query(None),
    service: ProposalService = Depends(get_proposal_service),
):
    """Flat comments plus their reply threads"""
    service.get_public_proposal(proposal_id)
    return CommentService.for_proposals(service.db).list_comments(
        proposal_id, since=since, limit=limit, block_id=block_id
    )


@router.api_route(
    "/{proposal_id}/comments/{comment_id}/resolve",
    methods=["POST", "PATCH"],
    response_model=CommentOut,
)
async def resolve_comment(
    proposal_id: int,
    comment_id: int,
    data: Optional[CommentResolve] = None,
    service: ProposalService = Depends(get_proposal_service),
):
    """Toggle the resolved flag of a top-level comment, or set it explicitly"""
    service.get_public_proposal(proposal_id)
    return CommentService.for_proposals(service.db).resolve_comment(
        proposal_id, comment_id, data.is_resolved if data else None
    )
