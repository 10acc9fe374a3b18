from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models import User

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# OAuth2 schemes; the optional one lets anonymous callers through
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


class EmailAlreadyRegistered(Exception):
    """Raised when registering an email that already has an account."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # passlib's bcrypt backend detection fails against bcrypt>=4.1
        return bcrypt.checkpw(
            _bcrypt_input(plain_password),
            hashed_password.encode('utf-8')
        )


def get_password_hash(password: str) -> str:
    """Hash a password"""
    try:
        return pwd_context.hash(password)
    except ValueError:
        hashed = bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
        return hashed.decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email})


def decode_token(token: str) -> Optional[int]:
    """Return the user id carried by ``token``, or None if it is not valid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except InvalidTokenError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None

    try:
        return int(subject)
    except (TypeError, ValueError):
        return None


def create_user(db: Session, email: str, password: str) -> User:
    """
    Create a user account.

    Raises:
        EmailAlreadyRegistered: if the email is taken
    """
    email = email.lower()
    if db.query(User).filter(User.email == email).first():
        raise EmailAlreadyRegistered(email)

    user = User(email=email, hashed_password=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)

    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user.

    Args:
        db: Database session
        email: Account email
        password: Password

    Returns:
        User object if authenticated, None otherwise
    """
    user = db.query(User).filter(User.email == email.lower()).first()

    if not user:
        return None

    if not verify_password(password, user.hashed_password):
        return None

    return user


def _load_active_user(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None

    user_id = decode_token(token)
    if user_id is None:
        return None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None

    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the current authenticated user from token.

    Raises:
        HTTPException: If authentication fails
    """
    user = _load_active_user(db, token)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Current user if a valid token was sent; anonymous otherwise."""
    return _load_active_user(db, token)
