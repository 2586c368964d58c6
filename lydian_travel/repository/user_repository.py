from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.user import User


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id_user == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def create_user(db: Session, user: User) -> User:
    db.add(user)
    db.flush()
    return user
