"""Creator repository - Database operations for creator profiles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Creator


class CreatorRepository:
    """Repository for creator database operations"""

    @staticmethod
    def get_creator(db: Session, creator_id: str) -> Optional[Creator]:
        return db.query(Creator).filter(Creator.id == creator_id).first()

    @staticmethod
    def get_by_wallet(db: Session, wallet: str) -> Optional[Creator]:
        return db.query(Creator).filter(Creator.wallet == wallet).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[Creator]:
        return db.query(Creator).filter(Creator.username == username).first()

    @staticmethod
    def list_creators(db: Session) -> list[Creator]:
        """Newest profiles first"""
        return db.query(Creator).order_by(Creator.created_at.desc()).all()

    @staticmethod
    def create_creator(db: Session, **creator_data) -> Creator:
        creator = Creator(**creator_data)
        db.add(creator)
        db.commit()
        db.refresh(creator)
        return creator
