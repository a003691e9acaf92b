from sqlalchemy.orm import Session
from admitplan.models import User
from typing import Optional

def create_user(db: Session, name: str, role: str = "STUDENT", family_id: Optional[str] = None) -> User:
    """Create a student or parent account"""
    db_user = User(name=name, role=role, family_id=family_id)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def share_family(db: Session, parent_id: int, child_id: int) -> bool:
    """True when both users exist and carry the same family id"""
    parent = get_user(db, parent_id)
    child = get_user(db, child_id)
    if not parent or not child:
        return False
    return bool(parent.family_id) and parent.family_id == child.family_id
