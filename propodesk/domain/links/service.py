"""Share link service - Business logic for public proposal and contract links"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Proposal, ProposalLink, User
from ...security_utils import generate_secure_token, hash_password_bcrypt, verify_password_bcrypt
from ..contracts.repository import ContractRepository
from ..proposals.repository import ProposalRepository
from ..proposals.schemas import PublicProposalResponse, SharedProposalResponse
from ..workflow import PROPOSAL_WORKFLOW
from .repository import LinkRepository
from .schemas import (
    LinkCreate,
    LinkCreated,
    LinkOut,
    LinkUpdate,
    contract_share_url,
    proposal_share_url,
)

logger = logging.getLogger(__name__)

# nanoid(16)-sized tokens: 12 random bytes -> 16 url-safe characters
TOKEN_BYTES = 12


def link_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    return expires_at is not None and expires_at < (now or datetime.utcnow())


class LinkService:
    """Service layer for share links"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = LinkRepository()
        self.proposals = ProposalRepository()
        self.contracts = ContractRepository()

    def _owned_proposal(self, proposal_id: int, user: User) -> Proposal:
        proposal = self.proposals.get_proposal_by_id(self.db, proposal_id, user.id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")
        return proposal

    def _new_token(self) -> str:
        token = generate_secure_token(TOKEN_BYTES)
        while self.repo.token_exists(self.db, token):
            token = generate_secure_token(TOKEN_BYTES)
        return token

    def create_link(self, data: LinkCreate, user: User) -> LinkCreated:
        """Create a share link for a proposal, or hand out a contract's signing link"""
        if data.type == "contract":
            return self._contract_link(data, user)

        proposal = self._owned_proposal(data.document_id, user)
        link = self.create_proposal_link(
            proposal, expires_at=data.expires_at, password=data.password, max_views=data.max_views
        )
        return LinkCreated(token=link.token, url=proposal_share_url(link.token), expires_at=link.expires_at)

    def create_proposal_link(
        self,
        proposal: Proposal,
        expires_at: Optional[datetime] = None,
        password: Optional[str] = None,
        max_views: Optional[int] = None,
    ) -> ProposalLink:
        """Store a new link; a draft proposal becomes sent once it can be shared"""
        link = self.repo.create_link(
            self.db,
            proposal.id,
            token=self._new_token(),
            password_hash=hash_password_bcrypt(password) if password else None,
            expires_at=expires_at,
            max_views=max_views,
        )
        logger.info(f"🔗 Created share link {link.id} for proposal {proposal.id}")

        if PROPOSAL_WORKFLOW.can(proposal.status, "send"):
            new_status = PROPOSAL_WORKFLOW.next_state(proposal.status, "send")
            self.proposals.update_proposal(self.db, proposal, status=new_status)
            logger.info(f"📤 Proposal {proposal.id} marked {new_status}")
        return link

    def get_active_link(self, proposal: Proposal) -> Optional[ProposalLink]:
        """First usable link of a proposal, if any"""
        for link in self.repo.get_links_for_proposal(self.db, proposal.id):
            if link.is_active and not link_expired(link.expires_at):
                if link.max_views is None or link.view_count < link.max_views:
                    return link
        return None

    def _contract_link(self, data: LinkCreate, user: User) -> LinkCreated:
        contract = self.contracts.get_contract_by_id(self.db, data.document_id, user.id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        contract = self.contracts.update_contract(self.db, contract, expires_at=data.expires_at)
        logger.info(f"🔗 Contract {contract.id} signing link expires_at={contract.expires_at}")
        return LinkCreated(
            token=contract.access_token,
            url=contract_share_url(contract.access_token),
            expires_at=contract.expires_at,
        )

    def list_links(self, proposal_id: int, user: User) -> list[LinkOut]:
        self._owned_proposal(proposal_id, user)
        return [LinkOut.model_validate(link) for link in self.repo.get_links_for_proposal(self.db, proposal_id)]

    def _owned_link(self, link_id: int, user: User) -> ProposalLink:
        link = self.repo.get_link_for_owner(self.db, link_id, user.id)
        if not link:
            raise HTTPException(status_code=404, detail="Link not found")
        return link

    def update_link(self, link_id: int, data: LinkUpdate, user: User) -> LinkOut:
        link = self._owned_link(link_id, user)
        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No updates provided")
        link = self.repo.update_link(self.db, link, **updates)
        return LinkOut.model_validate(link)

    def deactivate_link(self, link_id: int, user: User) -> dict:
        link = self._owned_link(link_id, user)
        self.repo.update_link(self.db, link, is_active=False)
        logger.info(f"🚫 Link {link_id} revoked")
        return {"message": "Link revoked successfully"}

    def resolve_token(self, token: str, proposal_id: Optional[int] = None) -> ProposalLink:
        """Active, unexpired link for ``token`` (optionally tied to one proposal)"""
        link = self.repo.get_active_link_by_token(self.db, token)
        if not link or (proposal_id is not None and link.proposal_id != proposal_id):
            raise HTTPException(status_code=404, detail="Link not found or expired")
        if link_expired(link.expires_at):
            raise HTTPException(status_code=410, detail="Link has expired")
        return link

    def open_shared_proposal(self, token: str, password: Optional[str] = None) -> SharedProposalResponse:
        """Public access through a share link; counts the view and marks the proposal viewed"""
        link = self.resolve_token(token)

        if link.max_views and link.view_count >= link.max_views:
            raise HTTPException(status_code=410, detail="Link has reached maximum views")

        if link.password_hash:
            if not password:
                raise HTTPException(status_code=401, detail="Password required")
            if not verify_password_bcrypt(password, link.password_hash):
                raise HTTPException(status_code=401, detail="Invalid password")

        proposal = self.proposals.get_proposal(self.db, link.proposal_id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")

        link.view_count = (link.view_count or 0) + 1
        updates = {"view_count": (proposal.view_count or 0) + 1}
        if PROPOSAL_WORKFLOW.can(proposal.status, "mark_viewed"):
            updates["status"] = PROPOSAL_WORKFLOW.next_state(proposal.status, "mark_viewed")
        proposal = self.proposals.update_proposal(self.db, proposal, **updates)
        logger.info(f"👀 Proposal {proposal.id} viewed via link {link.id} (status={proposal.status})")

        return SharedProposalResponse(
            proposal=PublicProposalResponse.model_validate(proposal), link_id=link.id
        )

    def verify_decision_token(self, proposal_id: int, token: str) -> ProposalLink:
        """A recipient decision needs an active, unexpired link of that same proposal"""
        link = self.repo.get_active_link_by_token(self.db, token)
        if not link or link.proposal_id != proposal_id:
            raise HTTPException(status_code=403, detail="Invalid or expired share token")
        if link_expired(link.expires_at):
            raise HTTPException(status_code=403, detail="Share link has expired")
        return link
