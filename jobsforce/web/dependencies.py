"""Shared FastAPI dependencies."""

from fastapi import HTTPException, Request

from jobsforce.models import User
from jobsforce.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_user_or_404(services: Services, user_id: int) -> User:
    user = services.users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def int_param(request: Request, name: str, default: int, minimum: int = 1) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name} must be an integer")


def float_param(request: Request, name: str, default: float) -> float:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name} must be a number")
