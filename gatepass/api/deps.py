from typing import Generator, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from gatepass.core.security import decode_token
from gatepass.core.workflow.service import RemovalService
from gatepass.db.models import User
from gatepass.db.repository import SqlAlchemyRemovalRepository
from gatepass.db.session import SessionLocal
from gatepass.services.reports import ReportService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db() -> Generator:
    """Database session dependency. Uncommitted work is rolled back on error."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_optional_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[User]:
    """Resolve the bearer token to an active user, or None."""
    if not token:
        return None

    user_id = decode_token(token)
    if not user_id:
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if user and user.is_active:
        return user
    return None


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Get current authenticated user from JWT token."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_removal_service(db: Session = Depends(get_db)) -> RemovalService:
    return RemovalService(SqlAlchemyRemovalRepository(db))


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(SqlAlchemyRemovalRepository(db))
