from typing import Optional

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Caller identity taken from the bearer token's claims."""

    # opaque string id (uuid, cuid, ...), matches users.user_id
    id: str
    email: Optional[str] = None
