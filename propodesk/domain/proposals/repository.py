"""Proposal repository - Database operations for proposals"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Proposal, ProposalVersion


class ProposalRepository:
    """Repository for proposal database operations"""

    @staticmethod
    def get_proposals(db: Session, user_id: int, status: Optional[str] = None) -> list[Proposal]:
        """Get all proposals for a user, newest first"""
        query = db.query(Proposal).filter(Proposal.user_id == user_id)
        if status:
            query = query.filter(Proposal.status == status)
        return query.order_by(Proposal.created_at.desc(), Proposal.id.desc()).all()

    @staticmethod
    def get_proposal_by_id(db: Session, proposal_id: int, user_id: int) -> Optional[Proposal]:
        """Get a proposal owned by the user"""
        return (
            db.query(Proposal)
            .filter(Proposal.id == proposal_id, Proposal.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_proposal(db: Session, proposal_id: int) -> Optional[Proposal]:
        """Get a proposal without an ownership check (public share flows)"""
        return db.query(Proposal).filter(Proposal.id == proposal_id).first()

    @staticmethod
    def create_proposal(db: Session, user_id: int, **proposal_data) -> Proposal:
        proposal = Proposal(user_id=user_id, **proposal_data)
        db.add(proposal)
        db.commit()
        db.refresh(proposal)
        return proposal

    @staticmethod
    def update_proposal(db: Session, proposal: Proposal, **updates) -> Proposal:
        for key, value in updates.items():
            setattr(proposal, key, value)
        db.commit()
        db.refresh(proposal)
        return proposal

    @staticmethod
    def delete_proposal(db: Session, proposal: Proposal) -> None:
        db.delete(proposal)
        db.commit()

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    @staticmethod
    def get_versions(db: Session, proposal_id: int) -> list[ProposalVersion]:
        return (
            db.query(ProposalVersion)
            .filter(ProposalVersion.proposal_id == proposal_id)
            .order_by(ProposalVersion.version_number.asc())
            .all()
        )

    @staticmethod
    def get_version(db: Session, proposal_id: int, version_id: int) -> Optional[ProposalVersion]:
        return (
            db.query(ProposalVersion)
            .filter(ProposalVersion.id == version_id, ProposalVersion.proposal_id == proposal_id)
            .first()
        )

    @staticmethod
    def create_version(db: Session, proposal: Proposal, **version_data) -> ProposalVersion:
        """Snapshot numbered one past the proposal's latest version"""
        latest = (
            db.query(func.max(ProposalVersion.version_number))
            .filter(ProposalVersion.proposal_id == proposal.id)
            .scalar()
        )
        version = ProposalVersion(
            proposal_id=proposal.id, version_number=(latest or 0) + 1, **version_data
        )
        db.add(version)
        db.commit()
        db.refresh(version)
        return version
