"""
Auth endpoints: register, login, token verification.

Security notes
--------------
* Login returns the *same* error message whether the username doesn't exist
  or the password is wrong.  This prevents user-enumeration attacks.
* Passwords are only ever accepted in request bodies; they are hashed
  before they reach the database and never echoed or logged.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from core.envelope import ApiError, CONFLICT, UNAUTHORIZED, Envelope, ok
from core.logger import logger
from core.security import (
    TokenIdentity,
    verify_password,
    hash_password,
    create_access_token,
    get_current_identity,
)
from models.user import User
from auth.schemas import (
    LoginRequest,
    LoginResult,
    RegisterRequest,
    RegisterResult,
    UserSummary,
    VerifyResult,
)

router = APIRouter(prefix="/auth", tags=["auth"])

# Generic message used for both "no such user" and "wrong password"
_LOGIN_FAIL = "Invalid username or password"

_DUPLICATE = "Username already exists"


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=Envelope[RegisterResult],
    status_code=status.HTTP_201_CREATED,
)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create a ``user``-role account.  Admins are created by seed_admin.py."""
    if db.query(User.id).filter(User.username == body.username).first():
        raise ApiError(status.HTTP_400_BAD_REQUEST, _DUPLICATE, code=CONFLICT)

    user = User(
        username=body.username,
        password_hash=hash_password(body.password),
        email=body.email,
        role="user",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration took the name after the check above
        db.rollback()
        logger.info("Registration lost race for username=%s", body.username)
        raise ApiError(status.HTTP_400_BAD_REQUEST, _DUPLICATE, code=CONFLICT)
    db.refresh(user)

    logger.info("Registered user id=%d username=%s", user.id, user.username)
    return ok(RegisterResult(user_id=user.id), "User registered successfully")


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=Envelope[LoginResult])
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return a signed JWT plus the public user summary."""
    user = db.query(User).filter(User.username == body.username).first()

    # Unified failure path: no information leaks about whether the user exists
    if not user or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for username=%s", body.username)
        raise ApiError(status.HTTP_401_UNAUTHORIZED, _LOGIN_FAIL, code=UNAUTHORIZED)

    token = create_access_token(
        {
            "sub": user.username,
            "user_id": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role,
        }
    )
    return ok(
        LoginResult(token=token, user=UserSummary.model_validate(user)),
        "Login successful",
    )


# ---------------------------------------------------------------------------
# GET /auth/verify
# ---------------------------------------------------------------------------


@router.get("/verify", response_model=Envelope[VerifyResult])
def verify(identity: TokenIdentity = Depends(get_current_identity)):
    """Echo the identity carried by a still-valid token."""
    user = UserSummary(
        id=identity.user_id,
        username=identity.username,
        email=identity.email,
        role=identity.role,
    )
    return ok(VerifyResult(user=user))
