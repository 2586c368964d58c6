from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from lydian_travel.models.account_token import AccountToken


def create_token(db: Session, token: AccountToken) -> AccountToken:
    db.add(token)
    db.flush()
    return token


def get_token(db: Session, token: str, purpose: str) -> Optional[AccountToken]:
    return (
        db.query(AccountToken)
        .filter(AccountToken.token == token, AccountToken.purpose == purpose)
        .first()
    )


def mark_used(db: Session, token: AccountToken, used_at: datetime) -> AccountToken:
    token.used_at = used_at
    db.flush()
    return token
