"""Contract repository - Database operations for contracts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Contract, ContractSignature


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def get_contracts(db: Session, user_id: int, status: Optional[str] = None) -> list[Contract]:
        """Get all contracts for a user, newest first"""
        query = db.query(Contract).filter(Contract.user_id == user_id)
        if status:
            query = query.filter(Contract.status == status)
        return query.order_by(Contract.created_at.desc(), Contract.id.desc()).all()

    @staticmethod
    def get_contract_by_id(db: Session, contract_id: int, user_id: int) -> Optional[Contract]:
        """Get a specific contract by ID"""
        return (
            db.query(Contract)
            .filter(Contract.id == contract_id, Contract.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_contract(db: Session, contract_id: int) -> Optional[Contract]:
        """Get a contract without an ownership check (public comment flows)"""
        return db.query(Contract).filter(Contract.id == contract_id).first()

    @staticmethod
    def get_contract_by_token(db: Session, access_token: str) -> Optional[Contract]:
        """Get a contract by its public signing token"""
        return db.query(Contract).filter(Contract.access_token == access_token).first()

    @staticmethod
    def create_contract(db: Session, user_id: int, **contract_data) -> Contract:
        """Create a new contract"""
        contract = Contract(user_id=user_id, **contract_data)
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract

    @staticmethod
    def update_contract(db: Session, contract: Contract, **updates) -> Contract:
        """Update contract fields"""
        for key, value in updates.items():
            setattr(contract, key, value)
        db.commit()
        db.refresh(contract)
        return contract

    @staticmethod
    def delete_contract(db: Session, contract: Contract) -> None:
        db.delete(contract)
        db.commit()

    @staticmethod
    def add_signature(db: Session, contract: Contract, **signature_data) -> ContractSignature:
        """Stage a signature row; committed together with the status change"""
        signature = ContractSignature(contract_id=contract.id, **signature_data)
        db.add(signature)
        return signature
