"""
Authentication API endpoints
- Password login (bearer token)
- Current user
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.core.auth import TokenUser, get_current_user
from app.domain.user import LoginRequest
from app.services.auth_service import AuthService, AuthenticationError

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Login
# =============================================================================

@router.post("/login")
async def login(credentials: LoginRequest):
    """
    Exchange email (or username) and password for a bearer token

    Failed logins answer 422 with the offending field:
        {"errors": {"email": "notFound"}}
        {"errors": {"account": "locked"}}
        {"errors": {"password": "incorrectPassword"}}
    """
    try:
        token = AuthService().login(credentials.email, credentials.password)
        return token.model_dump()

    except AuthenticationError as e:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"errors": e.errors}
        )
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(status_code=500, detail=f"Error logging in: {str(e)}")


# =============================================================================
# Current User
# =============================================================================

@router.get("/me")
async def get_me(user: TokenUser = Depends(get_current_user)):
    """Account behind the token. Falls back to the token claims if the row is gone."""
    try:
        account = AuthService().get_user(user.id)

        if account is None:
            return {"status": "success", "data": user.model_dump()}

        return {"status": "success", "data": account.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching current user: {str(e)}")
