import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from expense_app.config import settings
from expense_app.database import get_db
from expense_app.dependencies import SESSION_COOKIE, get_current_user
from expense_app.models.platform import enabled_platforms, platform_for_country
from expense_app.models.user import User
from expense_app.schemas.auth import Token, LoginRequest, RegisterRequest, UserResponse
from expense_app.services.stripe_service import create_connected_account, delete_connected_account
from expense_app.utils.stripe_authentication import get_stripe_publishable_key
from expense_app.utils.security import verify_password, create_access_token, get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def to_user_response(user: User) -> UserResponse:
    """User data with the publishable key of its platform"""
    response = UserResponse.model_validate(user)
    response.stripe_publishable_key = get_stripe_publishable_key(user.platform)
    return response


@router.post("/login", response_model=Token)
async def login(login_data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Log in and open a session"""
    user = db.query(User).filter(User.email == login_data.email).first()

    if not user or not verify_password(login_data.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    response.set_cookie(
        SESSION_COOKIE,
        access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )

    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    """Close the session"""
    response.delete_cookie(SESSION_COOKIE)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(register_data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user.

    A Stripe connected account is created on the platform serving the
    user's country before the user is stored.
    """
    try:
        platform = platform_for_country(register_data.country)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not enabled_platforms()[platform]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Registration is not available for {register_data.country}"
        )

    existing_user = db.query(User).filter(User.email == register_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user with this email already exists"
        )

    stripe_account_id = create_connected_account(
        platform, register_data.country, register_data.email
    )

    new_user = User(
        email=register_data.email,
        password=get_password_hash(register_data.password),
        country=register_data.country,
        platform=platform,
        stripe_account_id=stripe_account_id
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # same email registered while the account was being created
        db.rollback()
        logger.warning("Duplicate registration for %s, removing %s", register_data.email, stripe_account_id)
        delete_connected_account(platform, stripe_account_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user with this email already exists"
        )
    db.refresh(new_user)
    logger.info("Registered user %s on platform %s", new_user.id, platform.value)

    return to_user_response(new_user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Current user"""
    return to_user_response(current_user)
