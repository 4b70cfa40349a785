"""Proposal service - Business logic for proposal operations"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...document_templates import proposal_html
from ...email_service import send_proposal_decision_email, send_proposal_share_email
from ...models import Proposal, ProposalVersion, User
from ...services.pdf_service import PDFService, PDFServiceError
from ...shared.validators import require_client_email
from ...utils.sanitization import sanitize_html, sanitize_string
from ..links.schemas import proposal_share_url
from ..links.service import LinkService
from ..quotes.engine import compute_totals, quote_request_from_snapshot
from ..workflow import PROPOSAL_WORKFLOW, InvalidTransition
from .repository import ProposalRepository
from .schemas import (
    ProposalCreate,
    ProposalDecision,
    ProposalResponse,
    ProposalSendRequest,
    ProposalSendResponse,
    ProposalUpdate,
    ProposalVersionCreate,
)

logger = logging.getLogger(__name__)

_PLAIN_FIELDS = ("title", "client_name", "client_company", "client_phone", "client_address")
_SNAPSHOT_ALIASES = ("selectedServices", "addOns", "contractTerm")
# A decided proposal keeps the body the client saw
DECIDED_STATUSES = ("accepted", "rejected")


def priced_snapshot(calculator_data: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """
    Recompute totals for a stored calculator selection.

    Client-sent totals are discarded; the snapshot is rewritten with
    normalized selection keys and the engine's totals. Snapshots without a
    marketing selection are returned unchanged.
    """
    request = quote_request_from_snapshot(calculator_data)
    if request is None:
        return calculator_data

    totals = compute_totals(request.services, request.add_ons, request.contract_term)
    snapshot = {key: value for key, value in calculator_data.items() if key not in _SNAPSHOT_ALIASES}
    snapshot.update(
        services=request.services.model_dump(),
        add_ons=request.add_ons.model_dump(),
        contract_term=request.contract_term,
        totals=totals.model_dump(),
    )
    return snapshot


def sanitize_content(content: Any) -> Any:
    """HTML bodies are cleaned; block documents are stored as-is and escaped on render"""
    if isinstance(content, str):
        return sanitize_html(content)
    return content


class ProposalService:
    """Service layer for proposal business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProposalRepository()
        self.links = LinkService(db)
        self.pdf_service = PDFService()

    def get_proposals(self, user: User, status: Optional[str] = None) -> list[Proposal]:
        return self.repo.get_proposals(self.db, user.id, status)

    def get_proposal(self, proposal_id: int, user: User) -> Proposal:
        proposal = self.repo.get_proposal_by_id(self.db, proposal_id, user.id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")
        return proposal

    def get_public_proposal(self, proposal_id: int) -> Proposal:
        proposal = self.repo.get_proposal(self.db, proposal_id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")
        return proposal

    def _priced(self, calculator_data: Optional[dict]) -> Optional[dict]:
        try:
            return priced_snapshot(calculator_data)
        except ValidationError as e:
            logger.warning(f"⚠️ Rejected calculator selection: {e.error_count()} error(s)")
            raise HTTPException(status_code=400, detail=f"Invalid calculator selection: {e}") from e

    def create_proposal(self, data: ProposalCreate, user: User) -> Proposal:
        logger.info(f"📝 Creating proposal for user_id: {user.id}")
        proposal_data = data.model_dump()
        for field in _PLAIN_FIELDS:
            proposal_data[field] = sanitize_string(proposal_data[field])
        proposal_data["content"] = sanitize_content(data.content)
        proposal_data["calculator_data"] = self._priced(data.calculator_data)
        proposal_data["status"] = "draft"
        return self.repo.create_proposal(self.db, user.id, **proposal_data)

    def update_proposal(self, proposal_id: int, data: ProposalUpdate, user: User) -> Proposal:
        proposal = self.get_proposal(proposal_id, user)
        updates = data.model_dump(exclude_unset=True)
        for field in _PLAIN_FIELDS:
            if updates.get(field) is not None:
                updates[field] = sanitize_string(updates[field])
        if "content" in updates:
            updates["content"] = sanitize_content(updates["content"])
        if "calculator_data" in updates:
            updates["calculator_data"] = self._priced(updates["calculator_data"])
        return self.repo.update_proposal(self.db, proposal, **updates)

    def delete_proposal(self, proposal_id: int, user: User) -> dict:
        proposal = self.get_proposal(proposal_id, user)
        self.repo.delete_proposal(self.db, proposal)
        logger.info(f"🗑️ Proposal {proposal_id} deleted by user {user.id}")
        return {"message": "Proposal deleted successfully"}

    # ------------------------------------------------------------------
    # VERSIONS
    # ------------------------------------------------------------------

    def save_version(
        self, proposal_id: int, data: ProposalVersionCreate, user: User
    ) -> ProposalVersion:
        """Snapshot the current title and body"""
        proposal = self.get_proposal(proposal_id, user)
        version = self.repo.create_version(
            self.db,
            proposal,
            title=proposal.title,
            content=proposal.content,
            label=sanitize_string(data.label),
            author_name=user.full_name or user.email,
        )
        logger.info(f"💾 Proposal {proposal.id} saved as version {version.version_number}")
        return version

    def get_versions(self, proposal_id: int, user: User) -> list[ProposalVersion]:
        proposal = self.get_proposal(proposal_id, user)
        return self.repo.get_versions(self.db, proposal.id)

    def get_version(self, proposal_id: int, version_id: int, user: User) -> ProposalVersion:
        proposal = self.get_proposal(proposal_id, user)
        version = self.repo.get_version(self.db, proposal.id, version_id)
        if not version:
            raise HTTPException(status_code=404, detail="Version not found")
        return version

    def restore_version(self, proposal_id: int, version_id: int, user: User) -> Proposal:
        """Put a saved version's title and body back on the proposal"""
        version = self.get_version(proposal_id, version_id, user)
        proposal = version.proposal
        if proposal.status in DECIDED_STATUSES:
            raise HTTPException(
                status_code=409, detail=f"Cannot restore a proposal with status '{proposal.status}'"
            )
        proposal = self.repo.update_proposal(
            self.db, proposal, title=version.title, content=version.content
        )
        logger.info(f"↩️ Proposal {proposal.id} restored to version {version.version_number}")
        return proposal

    # ------------------------------------------------------------------
    # WORKFLOW
    # ------------------------------------------------------------------

    async def send_proposal(
        self, proposal_id: int, data: ProposalSendRequest, user: User
    ) -> ProposalSendResponse:
        """Email the client a share link, creating one when none is usable"""
        proposal = self.get_proposal(proposal_id, user)
        try:
            recipient = require_client_email(proposal.client_email)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        if proposal.status not in ("draft", "sent", "viewed"):
            raise HTTPException(
                status_code=409, detail=f"Cannot send a proposal with status '{proposal.status}'"
            )

        link = self.links.get_active_link(proposal)
        if link is None:
            link = self.links.create_proposal_link(proposal, expires_at=data.expires_at)
        share_url = proposal_share_url(link.token)

        email_sent = True
        try:
            await send_proposal_share_email(
                to=recipient,
                client_name=proposal.client_name,
                sender_name=user.full_name or user.company or "Your agency",
                proposal_title=proposal.title,
                share_url=share_url,
                message=data.message,
            )
        except Exception as e:
            email_sent = False
            logger.warning(f"⚠️ Proposal {proposal.id} share email failed: {e}")

        self.db.refresh(proposal)
        return ProposalSendResponse(
            proposal=ProposalResponse.model_validate(proposal),
            token=link.token,
            url=share_url,
            email_sent=email_sent,
        )

    async def decide(self, proposal_id: int, decision: ProposalDecision, action: str) -> Proposal:
        """Apply a recipient's accept or reject through the share token"""
        proposal = self.get_public_proposal(proposal_id)
        self.links.verify_decision_token(proposal_id, decision.token)

        try:
            new_status = PROPOSAL_WORKFLOW.next_state(proposal.status, action)
        except InvalidTransition as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

        proposal = self.repo.update_proposal(self.db, proposal, status=new_status)
        logger.info(f"🤝 Proposal {proposal.id} {new_status} via share link")

        owner = proposal.user
        if owner and owner.email:
            try:
                await send_proposal_decision_email(
                    to=owner.email,
                    owner_name=owner.full_name or owner.email,
                    client_name=decision.signer_name or proposal.client_name,
                    proposal_title=proposal.title,
                    decision=new_status,
                )
            except Exception as e:
                logger.warning(f"⚠️ Decision notification for proposal {proposal.id} failed: {e}")
        return proposal

    async def generate_pdf(self, proposal_id: int, user: User) -> tuple[bytes, str]:
        proposal = self.get_proposal(proposal_id, user)
        totals = (proposal.calculator_data or {}).get("totals")
        filename = f"Proposal-{proposal.id}.pdf"
        try:
            pdf_bytes = await self.pdf_service.render_pdf(proposal_html(proposal, totals), filename)
        except PDFServiceError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return pdf_bytes, filename
