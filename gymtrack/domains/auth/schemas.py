# gymtrack/domains/auth/schemas.py

from pydantic import BaseModel
from typing import Optional

class CurrentUser(BaseModel):
    """Signed-in user resolved from the request's ID token"""
    uid: str
    email: Optional[str] = None
    is_admin: bool = False
