from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from expense_app.database import get_db
from expense_app.models.user import User
from expense_app.services.stripe_service import StripeAccount
from expense_app.utils.security import decode_access_token

SESSION_COOKIE = "access_token"

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_from_token(db: Session, token: Optional[str]) -> Optional[User]:
    """User the token belongs to, None for a missing or invalid token"""
    if not token:
        return None
    payload = decode_access_token(token)
    if not payload or "sub" not in payload:
        return None
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Authenticated user from the bearer token or the session cookie"""
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)
    user = get_user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_stripe_account(current_user: User = Depends(get_current_user)) -> StripeAccount:
    """Connected account of the current user"""
    if not current_user.stripe_account_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No Stripe account is linked to this user"
        )
    return StripeAccount(
        account_id=current_user.stripe_account_id,
        platform=current_user.platform
    )
