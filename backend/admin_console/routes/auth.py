"""Authentication routes: login, logout, current session."""

from fastapi import APIRouter, Depends, HTTPException

from admin_console.dependencies.auth import get_console
from admin_console.exceptions import GatewayError, UnauthorizedError
from admin_console.schemas.auth import LoginRequest, SessionRead
from admin_console.services.console import Console

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=SessionRead)
async def login(body: LoginRequest, console: Console = Depends(get_console)):
    try:
        response = await console.gate.login(body.email, body.password)
    except UnauthorizedError as e:
        raise HTTPException(status_code=401, detail={"message": e.message, "reason": e.reason})
    except GatewayError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return SessionRead(authenticated=True, profile=response.profile)


@router.post("/logout", response_model=SessionRead)
async def logout(console: Console = Depends(get_console)):
    console.gate.logout()
    return SessionRead(authenticated=False)


@router.get("/session", response_model=SessionRead)
async def current_session(console: Console = Depends(get_console)):
    profile = console.gate.current_session()
    return SessionRead(authenticated=profile is not None, profile=profile)
