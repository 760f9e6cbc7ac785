# gymtrack/domains/auth/router.py

from fastapi import APIRouter, Depends

from gymtrack.domains.auth.schemas import CurrentUser
from gymtrack.domains.auth.token_handler import verify_token

router = APIRouter()

@router.get("/me", response_model=CurrentUser)
async def get_me(user: CurrentUser = Depends(verify_token)):
    return user
