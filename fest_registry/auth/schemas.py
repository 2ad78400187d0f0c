from typing import Optional

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Authenticated caller, resolved from the access token and the users table."""

    id: int
    role: str
    college_id: Optional[int] = None
    full_name: Optional[str] = None
