from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ..core.limiter import auth_attempts
from ..core.security import (
    EmailAlreadyRegistered,
    authenticate_user,
    create_user,
    get_current_user,
    issue_token,
)
from ..database import get_db
from ..models import User
from ..schemas.user import Token, UserCreate, UserLogin, UserResponse

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new account and return an access token."""
    auth_attempts.check(request)

    try:
        user = create_user(db, user_data.email, user_data.password)
    except EmailAlreadyRegistered:
        auth_attempts.record_failure(request)
        raise HTTPException(status_code=400, detail="User already exists with this email")

    return Token(access_token=issue_token(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=Token)
def login(
    request: Request,
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Exchange email and password for an access token.

    Only failed logins count against the client's attempt budget.
    """
    auth_attempts.check(request)

    user = authenticate_user(db, credentials.email, credentials.password)

    if user is None:
        auth_attempts.record_failure(request)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=issue_token(user), user=UserResponse.model_validate(user))


@router.get("/profile", response_model=UserResponse)
def profile(current_user: User = Depends(get_current_user)):
    return current_user
