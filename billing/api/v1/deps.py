# billing/api/v1/deps.py
from typing import Optional

from fastapi import Header, HTTPException, status


async def get_optional_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Owner id forwarded by the identity provider in front of the service."""
    if x_owner_id is None or not x_owner_id.strip():
        return None
    return x_owner_id.strip()


async def get_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> str:
    owner_id = await get_optional_owner_id(x_owner_id)
    if owner_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please log in")
    return owner_id
