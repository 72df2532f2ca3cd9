"""Identity helpers delegating to the upstream identity provider."""
from fastapi import Depends, Header, HTTPException, status
from typing import Optional
from luxestays.backend.core.config import settings


def get_current_user(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """
    Get current authenticated user.
    
    The identity provider sits in front of the API and forwards an opaque
    user identifier in the X-User-Id header. Returns None for anonymous
    visitors.
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None


def is_ceo(user: Optional[str]) -> bool:
    return user is not None and user in settings.operator_ids


def owned_resort_id(user: Optional[str]) -> Optional[str]:
    """Resort assigned to a resort owner, or None for everyone else."""
    if user is None or is_ceo(user):
        return None
    return settings.resort_owner_ids.get(user)


def require_user(user: Optional[str] = Depends(get_current_user)) -> str:
    """Reject anonymous callers."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in required"
        )
    return user


def require_operator(user: str = Depends(require_user)) -> str:
    """Admit the CEO and resort owners."""
    if not is_ceo(user) and owned_resort_id(user) is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operator access required"
        )
    return user


def require_ceo(user: str = Depends(require_operator)) -> str:
    """Admit only CEO identities."""
    if not is_ceo(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="CEO access required"
        )
    return user


def ensure_can_manage_resort(operator: str, resort_id: Optional[str]) -> None:
    """
    Check that an operator may change a resort or its stay options.
    
    Raises:
        HTTPException: 403 when a resort owner reaches outside their resort
    """
    if is_ceo(operator):
        return
    if resort_id is None or owned_resort_id(operator) != resort_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your assigned resort"
        )
