"""
User endpoints: the admin's user list, role changes, and the caller's own
profile.

Accounts are created through /auth/register (always role ``user``) or by
bin/seed_admin.py; promoting someone to ``admin`` goes through
``PUT /users/{id}/role``.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from core.envelope import ApiError, NOT_FOUND, VALIDATION_ERROR, Envelope, ok
from core.logger import logger
from core.security import TokenIdentity, get_current_identity, require_admin
from models.user import User
from users.schemas import ChangeRoleRequest, UserRow

router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# GET /users: list all users (admin only)
# ---------------------------------------------------------------------------


@router.get("", response_model=Envelope[list[UserRow]])
def list_users(
    admin: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Return every user row, newest first (the schema leaves out password data)."""
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return ok([UserRow.model_validate(u) for u in users])


# ---------------------------------------------------------------------------
# GET /users/profile: the caller's own row
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=Envelope[UserRow])
def profile(
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    # The token may outlive the account it was issued for
    user = db.query(User).filter(User.id == identity.user_id).first()
    if not user:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found", code=NOT_FOUND)
    return ok(UserRow.model_validate(user))


# ---------------------------------------------------------------------------
# PUT /users/{id}/role: promote or demote a user (admin only)
# ---------------------------------------------------------------------------


@router.put("/{user_id}/role", response_model=Envelope[UserRow])
def change_role(
    user_id: int,
    body: ChangeRoleRequest,
    admin: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Set a user's role.  Takes effect at that user's next login; tokens
    already issued keep the role they were signed with.

    Guard: an admin cannot demote themselves.
    """
    if user_id == admin.user_id and body.role != "admin":
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "Cannot demote yourself",
            code=VALIDATION_ERROR,
        )

    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found", code=NOT_FOUND)

    target.role = body.role
    db.commit()
    db.refresh(target)

    logger.info("Admin %s set role of user id=%d to %s", admin.username, user_id, body.role)
    return ok(UserRow.model_validate(target), "Role updated")
