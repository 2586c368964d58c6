from typing import List, Optional

from sqlalchemy.orm import Session

from lydian_travel.models.session import UserSession


def create_session(db: Session, session: UserSession) -> UserSession:
    db.add(session)
    db.flush()
    return session


def get_session_by_access_token(db: Session, access_token: str) -> Optional[UserSession]:
    return db.query(UserSession).filter(UserSession.access_token == access_token).first()


def get_session_by_refresh_token(db: Session, refresh_token: str) -> Optional[UserSession]:
    return db.query(UserSession).filter(UserSession.refresh_token == refresh_token).first()


def get_active_sessions(db: Session, user_id: int) -> List[UserSession]:
    return (
        db.query(UserSession)
        .filter(UserSession.id_user == user_id, UserSession.is_active.is_(True))
        .all()
    )


def deactivate_session(db: Session, session: UserSession) -> UserSession:
    session.is_active = False
    db.flush()
    return session


def deactivate_sessions_by_user(db: Session, user_id: int) -> int:
    updated = (
        db.query(UserSession)
        .filter(UserSession.id_user == user_id, UserSession.is_active.is_(True))
        .update({UserSession.is_active: False}, synchronize_session=False)
    )
    db.flush()
    return updated
