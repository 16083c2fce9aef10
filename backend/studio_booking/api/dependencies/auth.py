# backend/studio_booking/api/dependencies/auth.py
"""
Caller role dependencies.

Authentication happens at the gateway in front of this service, which
forwards the caller's role in the ``X-Caller-Role`` header. Requests
without the header are treated as customers.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from ...core.enums import CallerRole

logger = logging.getLogger(__name__)

CALLER_ROLE_HEADER = "X-Caller-Role"


def get_caller_role(
    x_caller_role: Optional[str] = Header(default=None, alias=CALLER_ROLE_HEADER),
) -> CallerRole:
    """Resolve the caller role from the gateway header."""
    if x_caller_role is None or not x_caller_role.strip():
        return CallerRole.CUSTOMER
    try:
        return CallerRole(x_caller_role.strip().lower())
    except ValueError:
        logger.warning("Rejected unknown caller role %r", x_caller_role)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": f"Unknown caller role '{x_caller_role}'",
                "code": "invalid_caller_role",
                "details": {"allowed": [role.value for role in CallerRole]},
            },
        )


def require_staff(caller_role: CallerRole = Depends(get_caller_role)) -> CallerRole:
    if not caller_role.is_privileged:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Staff access required", "code": "forbidden"},
        )
    return caller_role


def require_admin(caller_role: CallerRole = Depends(get_caller_role)) -> CallerRole:
    if caller_role is not CallerRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Admin access required", "code": "forbidden"},
        )
    return caller_role
