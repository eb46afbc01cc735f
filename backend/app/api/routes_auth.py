from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from app.services.auth_service import AuthError, AuthService, get_auth_service

router = APIRouter(tags=["auth"])


class LoginIn(BaseModel):
    password: str


def require_admin(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> dict:
    """Gate for mutating catalog routes; accepts a raw token or 'Bearer <token>'."""
    try:
        return auth.verify(authorization)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.post("/api/login", summary="Admin login")
def login(payload: LoginIn, auth: AuthService = Depends(get_auth_service)):
    try:
        token = auth.login(payload.password)
    except AuthError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail={"success": False})
    return {"success": True, "token": token}
