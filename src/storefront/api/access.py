"""Caller identity for API routes.

Authentication happens upstream; the gateway forwards the caller's id in
``X-Customer-Id`` and their role in ``X-User-Role``. Routes declare what they
need as dependencies instead of comparing roles inline.
"""

from fastapi import Depends, Header, HTTPException

ADMIN_ROLE = "admin"


def current_customer(x_customer_id: str | None = Header(default=None)) -> str:
    if not x_customer_id:
        raise HTTPException(status_code=401, detail="Missing X-Customer-Id header")
    return x_customer_id


def current_role(x_user_role: str | None = Header(default=None)) -> str:
    return (x_user_role or "customer").lower()


def is_admin(role: str) -> bool:
    return role == ADMIN_ROLE


def require_admin(role: str = Depends(current_role)) -> str:
    if not is_admin(role):
        raise HTTPException(status_code=403, detail="Admin access required")
    return role
