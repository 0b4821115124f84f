import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from gatepass.api.deps import get_db, get_current_user
from gatepass.api.schemas.auth import Token, UserResponse
from gatepass.core.rbac.checker import PermissionChecker
from gatepass.core.security import authenticate_user, create_access_token
from gatepass.db.models import User

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Login with email and password and get an access token."""
    user = authenticate_user(db, form_data.username, form_data.password)

    if not user:
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Update last login
    user.last_login = datetime.utcnow()
    db.commit()

    return Token(access_token=create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user with roles, effective permissions and departments."""
    permissions = PermissionChecker.for_user(current_user).get_effective_permissions()
    return UserResponse.from_user(current_user, [str(p) for p in permissions])
