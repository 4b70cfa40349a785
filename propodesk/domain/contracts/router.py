"""Contract router - FastAPI endpoints for contract operations"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..comments import CommentCreate, CommentListResponse, CommentOut, CommentResolve, CommentService
from ..signatures import MAX_SIGNATURE_BYTES, SignatureError, signature_from_upload
from .schemas import (
    ContractCreate,
    ContractFromProposalRequest,
    ContractResponse,
    ContractStatus,
    ContractUpdate,
    CountersignRequest,
    PublicContractResponse,
    SignatureUploadResponse,
    SignContractRequest,
    SignContractResponse,
)
from .service import ContractService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contracts", tags=["Contracts"])


def get_contract_service(db: Session = Depends(get_db)) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(db)


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


# ============================================================================
# PUBLIC SIGNING (no authentication, token-gated)
# ============================================================================


@router.get("/view/{token}", response_model=PublicContractResponse)
async def view_contract(token: str, service: ContractService = Depends(get_contract_service)):
    """Open a contract through its signing link"""
    return PublicContractResponse.model_validate(service.view_by_token(token))


@router.post("/sign/{token}", response_model=SignContractResponse)
async def sign_contract(
    token: str,
    data: SignContractRequest,
    request: Request,
    service: ContractService = Depends(get_contract_service),
):
    """Client signs the contract"""
    contract = await service.sign_contract(
        token, data, ip_address=_client_ip(request), user_agent=request.headers.get("user-agent")
    )
    return SignContractResponse(contract=PublicContractResponse.model_validate(contract))


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ContractResponse])
async def get_contracts(
    status: Optional[ContractStatus] = Query(None, description="Filter by status"),
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Get all contracts for the current user"""
    return [ContractResponse.model_validate(c) for c in service.get_contracts(current_user, status)]


@router.post("", response_model=ContractResponse, status_code=201)
async def create_contract(
    data: ContractCreate,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return ContractResponse.model_validate(service.create_contract(data, current_user))


@router.post("/from-proposal/{proposal_id}", response_model=ContractResponse, status_code=201)
async def create_contract_from_proposal(
    proposal_id: int,
    data: Optional[ContractFromProposalRequest] = None,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Draft a service agreement from an accepted proposal's quote"""
    contract = service.create_from_proposal(
        proposal_id, data or ContractFromProposalRequest(), current_user
    )
    return ContractResponse.model_validate(contract)


@router.post("/signatures/upload", response_model=SignatureUploadResponse)
async def upload_signature(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
):
    """Convert an uploaded signature image to the stored data URL form"""
    content = await file.read(MAX_SIGNATURE_BYTES + 1)
    try:
        signature_data = signature_from_upload(content, file.content_type or "")
    except SignatureError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return SignatureUploadResponse(signature_data=signature_data)


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return ContractResponse.model_validate(service.get_contract(contract_id, current_user))


@router.patch("/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: int,
    data: ContractUpdate,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Edit a draft contract"""
    return ContractResponse.model_validate(service.update_contract(contract_id, data, current_user))


@router.delete("/{contract_id}")
async def delete_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return service.delete_contract(contract_id, current_user)


# ============================================================================
# WORKFLOW
# ============================================================================


@router.post("/{contract_id}/send", response_model=ContractResponse)
async def send_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Mark sent and email the signing link to the client"""
    return ContractResponse.model_validate(await service.send_contract(contract_id, current_user))


@router.post("/{contract_id}/cancel", response_model=ContractResponse)
async def cancel_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return ContractResponse.model_validate(service.cancel_contract(contract_id, current_user))


@router.post("/{contract_id}/countersign", response_model=ContractResponse)
async def countersign_contract(
    contract_id: int,
    data: CountersignRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Agency signature on a client-signed contract"""
    contract = service.countersign_contract(
        contract_id,
        data,
        current_user,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return ContractResponse.model_validate(contract)


@router.post("/{contract_id}/pdf")
async def generate_contract_pdf(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    pdf_bytes, filename = await service.generate_pdf(contract_id, current_user)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================================
# COMMENTS
# ============================================================================


@router.post("/{contract_id}/comments", response_model=CommentOut, status_code=201)
async def add_comment(
    contract_id: int,
    data: CommentCreate,
    service: ContractService = Depends(get_contract_service),
):
    service.get_public_contract(contract_id)
    return CommentService.for_contracts(service.db).add_comment(contract_id, data)


@router.get("/{contract_id}/comments", response_model=CommentListResponse)
async def list_comments(
    contract_id: int,
    since: Optional[datetime] = Query(None, description="Only comments created after this time"),
    limit: int = Query(100, ge=1, le=500),
    block_id: Optional[str] = Query(None),
    service: ContractService = Depends(get_contract_service),
):
    service.get_public_contract(contract_id)
    return CommentService.for_contracts(service.db).list_comments(
        contract_id, since=since, limit=limit, block_id=block_id
    )


@router.api_route(
    "/{contract_id}/comments/{comment_id}/resolve",
    methods=["POST", "PATCH"],
    response_model=CommentOut,
)
async def resolve_comment(
    contract_id: int,
    comment_id: int,
    data: Optional[CommentResolve] = None,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Owner toggles (or sets) the resolved flag of a top-level comment"""
    service.get_contract(contract_id, current_user)
    return CommentService.for_contracts(service.db).resolve_comment(
        contract_id, comment_id, data.is_resolved if data else None
    )
