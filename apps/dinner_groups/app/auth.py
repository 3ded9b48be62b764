from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException


def require_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Raise 401 if the request carries no user id."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return x_user_id.strip()
