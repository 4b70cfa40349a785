"""Share link repository - Database operations for proposal links"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Proposal, ProposalLink


class LinkRepository:
    """Repository for proposal link database operations"""

    @staticmethod
    def create_link(db: Session, proposal_id: int, **link_data) -> ProposalLink:
        link = ProposalLink(proposal_id=proposal_id, **link_data)
        db.add(link)
        db.commit()
        db.refresh(link)
        return link

    @staticmethod
    def get_links_for_proposal(db: Session, proposal_id: int) -> list[ProposalLink]:
        return (
            db.query(ProposalLink)
            .filter(ProposalLink.proposal_id == proposal_id)
            .order_by(ProposalLink.created_at.desc(), ProposalLink.id.desc())
            .all()
        )

    @staticmethod
    def get_active_link_by_token(db: Session, token: str) -> Optional[ProposalLink]:
        return (
            db.query(ProposalLink)
            .filter(ProposalLink.token == token, ProposalLink.is_active.is_(True))
            .first()
        )

    @staticmethod
    def get_link_for_owner(db: Session, link_id: int, user_id: int) -> Optional[ProposalLink]:
        """Get a link whose proposal belongs to the user"""
        return (
            db.query(ProposalLink)
            .join(Proposal, Proposal.id == ProposalLink.proposal_id)
            .filter(ProposalLink.id == link_id, Proposal.user_id == user_id)
            .first()
        )

    @staticmethod
    def token_exists(db: Session, token: str) -> bool:
        return db.query(ProposalLink.id).filter(ProposalLink.token == token).first() is not None

    @staticmethod
    def update_link(db: Session, link: ProposalLink, **updates) -> ProposalLink:
        for key, value in updates.items():
            setattr(link, key, value)
        db.commit()
        db.refresh(link)
        return link
