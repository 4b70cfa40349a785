"""Contract service - Business logic for contract operations"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...document_templates import contract_html
from ...email_service import send_contract_signed_notification, send_contract_signing_email
from ...models import Contract, User
from ...services.pdf_service import PDFService, PDFServiceError
from ...shared.validators import require_client_email
from ...utils.sanitization import sanitize_html, sanitize_string
from ..links.schemas import contract_share_url
from ..links.service import link_expired
from ..proposals.repository import ProposalRepository
from ..quotes.engine import compute_totals, quote_line_items, quote_request_from_snapshot
from ..signatures import SignatureError, normalize_signature
from ..workflow import CONTRACT_WORKFLOW, InvalidTransition
from .repository import ContractRepository
from .schemas import (
    ContractCreate,
    ContractFromProposalRequest,
    ContractUpdate,
    CountersignRequest,
    SignContractRequest,
)
from .templates import DEFAULT_AGREEMENT, fill_placeholders

logger = logging.getLogger(__name__)

_PLAIN_FIELDS = ("title", "client_name", "client_company", "client_address", "contract_term")
DEFAULT_GOVERNING_STATE = "California"


class ContractService:
    """Service layer for contract business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractRepository()
        self.proposals = ProposalRepository()
        self.pdf_service = PDFService()

    def _transition(self, contract: Contract, action: str) -> str:
        try:
            return CONTRACT_WORKFLOW.next_state(contract.status, action)
        except InvalidTransition as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

    def get_contracts(self, user: User, status: Optional[str] = None) -> list[Contract]:
        return self.repo.get_contracts(self.db, user.id, status)

    def get_contract(self, contract_id: int, user: User) -> Contract:
        contract = self.repo.get_contract_by_id(self.db, contract_id, user.id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def get_public_contract(self, contract_id: int) -> Contract:
        contract = self.repo.get_contract(self.db, contract_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def _get_by_token(self, token: str) -> Contract:
        contract = self.repo.get_contract_by_token(self.db, token)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_contract(self, data: ContractCreate, user: User) -> Contract:
        logger.info(f"📝 Creating contract for user_id: {user.id}")
        if data.proposal_id is not None and not self.proposals.get_proposal_by_id(
            self.db, data.proposal_id, user.id
        ):
            raise HTTPException(status_code=404, detail="Proposal not found")

        contract_data = data.model_dump()
        for field in _PLAIN_FIELDS:
            contract_data[field] = sanitize_string(contract_data[field])
        contract_data["content"] = sanitize_html(data.content)
        contract_data["status"] = "draft"
        return self.repo.create_contract(self.db, user.id, **contract_data)

    def update_contract(self, contract_id: int, data: ContractUpdate, user: User) -> Contract:
        """Edit a contract; only drafts can change"""
        contract = self.get_contract(contract_id, user)
        if contract.status != "draft":
            raise HTTPException(
                status_code=409, detail=f"Cannot edit a contract with status '{contract.status}'"
            )

        updates = data.model_dump(exclude_unset=True)
        for field in _PLAIN_FIELDS:
            if updates.get(field) is not None:
                updates[field] = sanitize_string(updates[field])
        if updates.get("content") is not None:
            updates["content"] = sanitize_html(updates["content"])
        return self.repo.update_contract(self.db, contract, **updates)

    def delete_contract(self, contract_id: int, user: User) -> dict:
        contract = self.get_contract(contract_id, user)
        if contract.status in ("signed", "countersigned", "completed"):
            raise HTTPException(status_code=409, detail="Signed contracts cannot be deleted")
        self.repo.delete_contract(self.db, contract)
        logger.info(f"🗑️ Contract {contract_id} deleted by user {user.id}")
        return {"message": "Contract deleted successfully"}

    # ------------------------------------------------------------------
    # WORKFLOW
    # ------------------------------------------------------------------

    async def send_contract(self, contract_id: int, user: User) -> Contract:
        """Mark the contract sent and email the signing link"""
        contract = self.get_contract(contract_id, user)
        try:
            recipient = require_client_email(contract.client_email)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        new_status = self._transition(contract, "send")
        contract = self.repo.update_contract(
            self.db, contract, status=new_status, sent_at=datetime.utcnow()
        )
        logger.info(f"📤 Contract {contract.id} sent to {recipient}")

        try:
            await send_contract_signing_email(
                to=recipient,
                client_name=contract.client_name,
                sender_name=user.full_name or user.company or "Your agency",
                contract_title=contract.title,
                signing_url=contract_share_url(contract.access_token),
            )
        except Exception as e:
            logger.warning(f"⚠️ Contract {contract.id} signing email failed: {e}")
        return contract

    def cancel_contract(self, contract_id: int, user: User) -> Contract:
        contract = self.get_contract(contract_id, user)
        new_status = self._transition(contract, "cancel")
        logger.info(f"🚫 Contract {contract.id} cancelled")
        return self.repo.update_contract(self.db, contract, status=new_status)

    def view_by_token(self, token: str) -> Contract:
        """Public view of a contract; opening a sent contract marks it viewed"""
        contract = self._get_by_token(token)
        if link_expired(contract.expires_at):
            raise HTTPException(status_code=410, detail="Contract has expired")

        if contract.status == "sent" and CONTRACT_WORKFLOW.can(contract.status, "mark_viewed"):
            contract = self.repo.update_contract(
                self.db, contract, status=CONTRACT_WORKFLOW.next_state(contract.status, "mark_viewed")
            )
            logger.info(f"👀 Contract {contract.id} viewed")
        return contract

    async def sign_contract(
        self,
        token: str,
        data: SignContractRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Contract:
        """Client signature through the public link"""
        contract = self._get_by_token(token)
        if contract.client_signed_at:
            raise HTTPException(status_code=400, detail="Contract already signed")
        if link_expired(contract.expires_at):
            raise HTTPException(status_code=410, detail="Contract has expired")

        new_status = self._transition(contract, "sign")
        try:
            signature_data = normalize_signature(data.signature_data)
        except SignatureError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        self.repo.add_signature(
            self.db,
            contract,
            signer_type="client",
            signer_name=sanitize_string(data.signer_name),
            signer_email=data.signer_email,
            signature_data=signature_data,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )
        contract = self.repo.update_contract(
            self.db, contract, status=new_status, client_signed_at=datetime.utcnow()
        )
        logger.info(f"✍️ Contract {contract.id} signed by client")

        owner = contract.user
        if owner and owner.email:
            try:
                await send_contract_signed_notification(
                    to=owner.email,
                    owner_name=owner.full_name or owner.email,
                    client_name=data.signer_name,
                    contract_title=contract.title,
                )
            except Exception as e:
                logger.warning(f"⚠️ Signed notification for contract {contract.id} failed: {e}")
        return contract

    def countersign_contract(
        self,
        contract_id: int,
        data: CountersignRequest,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Contract:
        """Agency signature; only a client-signed contract can be countersigned"""
        contract = self.get_contract(contract_id, user)
        new_status = self._transition(contract, "countersign")
        try:
            signature_data = normalize_signature(data.signature_data)
        except SignatureError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        self.repo.add_signature(
            self.db,
            contract,
            signer_type="user",
            signer_name=sanitize_string(data.signer_name) or user.full_name or "Provider",
            signer_email=user.email,
            signature_data=signature_data,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )
        contract = self.repo.update_contract(
            self.db, contract, status=new_status, user_signed_at=datetime.utcnow()
        )
        logger.info(f"✅ Contract {contract.id} countersigned -> {contract.status}")
        return contract

    # ------------------------------------------------------------------
    # GENERATION
    # ------------------------------------------------------------------

    def create_from_proposal(
        self, proposal_id: int, data: ContractFromProposalRequest, user: User
    ) -> Contract:
        """Draft a contract from a proposal's quote and the default agreement"""
        proposal = self.proposals.get_proposal_by_id(self.db, proposal_id, user.id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")

        request = quote_request_from_snapshot(proposal.calculator_data)
        if request is None:
            raise HTTPException(status_code=400, detail="Proposal has no calculator selection")

        totals = compute_totals(request.services, request.add_ons, request.contract_term)
        items = quote_line_items(request.services, request.add_ons, request.contract_term)
        deliverables = [
            {
                "name": item.description,
                "description": f"Quantity {item.quantity}" if item.quantity > 1 else "",
                "price": item.unit_price * item.quantity,
                "price_type": "monthly" if item.kind == "monthly" else "one-time",
            }
            for item in items
        ]
        contract_term = f"{request.contract_term} months"

        deliverables_html = "<ul>" + "".join(
            f"<li><strong>{sanitize_string(d['name'])}</strong>: ${d['price']:,.2f}/{d['price_type']}</li>"
            for d in deliverables
        ) + "</ul>"
        # Proposal fields are stored escaped already
        values = {
            "effective_date": datetime.utcnow().strftime("%B %d, %Y"),
            "company_name": sanitize_string(user.company) or "Your Company",
            "company_email": sanitize_string(user.email) or "",
            "client_name": proposal.client_name,
            "client_company": proposal.client_company or "",
            "client_email": proposal.client_email or "",
            "deliverables": deliverables_html,
            "contract_term": contract_term,
            "monthly_amount": f"${totals.monthly_total:,.2f}",
            "setup_fee": f"${totals.setup_total:,.2f}",
            "total_value": f"${totals.annual_total:,.2f}",
            "milestones": "As per agreed deliverables schedule",
            "governing_state": sanitize_string(data.governing_state) or DEFAULT_GOVERNING_STATE,
            "provider_name": sanitize_string(user.full_name) or "",
            "client_signer_name": proposal.client_name,
        }
        content = fill_placeholders(data.template or DEFAULT_AGREEMENT, values)

        contract = self.repo.create_contract(
            self.db,
            user.id,
            proposal_id=proposal.id,
            title=f"{proposal.title} - Service Agreement",
            content=sanitize_html(content),
            client_name=proposal.client_name,
            client_company=proposal.client_company,
            client_email=proposal.client_email,
            client_address=proposal.client_address,
            deliverables=deliverables,
            total_value=totals.annual_total,
            contract_term=contract_term,
            status="draft",
        )
        logger.info(f"📄 Contract {contract.id} generated from proposal {proposal.id}")
        return contract

    async def generate_pdf(self, contract_id: int, user: User) -> tuple[bytes, str]:
        contract = self.get_contract(contract_id, user)
        filename = f"Contract-{contract.id}.pdf"
        try:
            pdf_bytes = await self.pdf_service.render_pdf(contract_html(contract), filename)
        except PDFServiceError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return pdf_bytes, filename
