"""
JSON routes: authentication, driver dashboard/logging, admin user management.

Routes stay thin; domain errors raised by the services are mapped to HTTP
responses by the handlers registered in web.main.
"""

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from drivelog.models.user import User
from drivelog.utils.calendar_grid import get_calendar_data, get_greeting
from drivelog.utils.config import SESSION_LIFETIME
from drivelog.utils.logger import get_logger
from .auth_deps import (
    SESSION_COOKIE_NAME,
    get_current_user,
    get_session_token,
    require_admin,
    require_driver,
)
from .models import (
    CreateUserRequest,
    LoginRequest,
    LogHoursRequest,
    ProfileUpdateRequest,
    UpdateUserRequest,
    user_public,
    user_with_stats,
)

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])
driver_router = APIRouter(prefix="/driver", tags=["driver"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


def home_for(user: User) -> str:
    return "/admin/dashboard" if user.is_admin else "/driver/dashboard"


def _set_session_cookie(request: Request, response: JSONResponse, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=int(SESSION_LIFETIME.total_seconds()),
        path="/",
        httponly=True,
        secure=request.app.state.settings.is_production,
        samesite="lax",
    )


def _clear_session_cookie(response: JSONResponse) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")


def _log_hours_kwargs(payload: LogHoursRequest) -> Dict[str, Any]:
    return {
        "day_hours": payload.day_hours,
        "day_minutes": payload.day_minutes,
        "night_hours": payload.night_hours,
        "night_minutes": payload.night_minutes,
        "delete": payload.delete,
    }


# --- Auth ---

@auth_router.post("/login")
def login(request: Request, login_data: LoginRequest):
    """Login with email and password"""
    user, session = request.app.state.auth_service.login(login_data.email, login_data.password)

    response = JSONResponse({
        "status": "success",
        "user": user_public(user),
        "token": session.token,
        "redirect": home_for(user),
    })
    _set_session_cookie(request, response, session.token)
    return response


@auth_router.post("/logout")
def logout(request: Request):
    """Logout and clear session"""
    request.app.state.auth_service.logout(get_session_token(request))
    response = JSONResponse({"status": "success", "redirect": "/auth/login"})
    _clear_session_cookie(response)
    return response


@auth_router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {**user_public(current_user), "redirect": home_for(current_user)}


# --- Driver ---

@driver_router.get("/dashboard")
def driver_dashboard(
    request: Request,
    year: Optional[int] = None,
    month: Optional[int] = None,
    celebrate: bool = False,
    driver: User = Depends(require_driver),
):
    today = date.today()
    calendar = get_calendar_data(
        year or today.year,
        month or today.month,
        has_entry=driver.has_entry,
        get_entry=lambda day: driver.get_entry(day).model_dump(),
        today=today,
    )
    return {
        "user": user_public(driver),
        "greeting": get_greeting(),
        "today": today.isoformat(),
        "stats": driver.stats(today),
        "calendar": asdict(calendar),
        "show_fireworks": celebrate,
    }


@driver_router.post("/log")
def driver_log_hours(
    request: Request,
    payload: LogHoursRequest,
    driver: User = Depends(require_driver),
):
    stored = request.app.state.driving_log_service.record(
        driver.id, payload.date, **_log_hours_kwargs(payload)
    )
    logged = stored.has_entry(payload.date)
    return {
        "status": "success",
        "date": payload.date,
        "has_entry": logged,
        "entry": stored.get_entry(payload.date).model_dump(),
        "stats": stored.stats(),
        # Only celebrate when hours were actually logged
        "celebrate": logged and not payload.delete,
    }


@driver_router.get("/profile")
def driver_profile(driver: User = Depends(require_driver)):
    return {"user": user_public(driver)}


@driver_router.post("/profile")
def driver_update_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    driver: User = Depends(require_driver),
):
    stored, message = request.app.state.profile_service.update_profile(
        driver.id, payload.name, payload.current_password, payload.new_password
    )
    return {"status": "success", "message": message, "user": user_public(stored)}


# --- Admin ---

@admin_router.get("/dashboard")
def admin_dashboard(request: Request, admin: User = Depends(require_admin)):
    overview = request.app.state.admin_service.driver_overview()
    return {
        "user": user_public(admin),
        "drivers": [user_with_stats(item["user"], item["stats"]) for item in overview],
    }


@admin_router.get("/users")
def list_users(request: Request, admin: User = Depends(require_admin)):
    """List all pool users (admin only)"""
    users = request.app.state.admin_service.list_users()
    return {"users": [user_public(u) for u in sorted(users, key=lambda u: u.name.lower())]}


@admin_router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(request: Request, payload: CreateUserRequest, admin: User = Depends(require_admin)):
    user = request.app.state.admin_service.create_user(
        email=payload.email,
        name=payload.name,
        password=payload.password,
        role=payload.role,
        required_day_hours=payload.required_day_hours,
        required_night_hours=payload.required_night_hours,
    )
    return {"status": "success", "user": user_public(user)}


@admin_router.get("/users/{user_id}")
def view_user(request: Request, user_id: str, admin: User = Depends(require_admin)):
    """Driver statistics view"""
    user = request.app.state.admin_service.get_user(user_id)
    return {"user": user_with_stats(user), "can_change_password": not user.is_admin}


@admin_router.put("/users/{user_id}")
def update_user(
    request: Request,
    user_id: str,
    payload: UpdateUserRequest,
    admin: User = Depends(require_admin),
):
    user = request.app.state.admin_service.update_user(
        user_id,
        email=payload.email,
        name=payload.name,
        password=payload.password,
        required_day_hours=payload.required_day_hours,
        required_night_hours=payload.required_night_hours,
    )
    return {"status": "success", "user": user_public(user)}


@admin_router.delete("/users/{user_id}")
def delete_user(request: Request, user_id: str, admin: User = Depends(require_admin)):
    request.app.state.admin_service.delete_user(user_id)

    # Deleting yourself ends your session
    if user_id == admin.id:
        response = JSONResponse({"status": "success", "redirect": "/auth/login"})
        _clear_session_cookie(response)
        return response
    return {"status": "success"}


@admin_router.get("/users/{user_id}/hours")
def user_hours(request: Request, user_id: str, admin: User = Depends(require_admin)):
    user = request.app.state.admin_service.get_user(user_id)
    return {"user": user_public(user, include_log=True)}


@admin_router.post("/users/{user_id}/hours")
def update_user_hours(
    request: Request,
    user_id: str,
    payload: LogHoursRequest,
    admin: User = Depends(require_admin),
):
    stored = request.app.state.admin_service.update_hours(
        user_id, payload.date, **_log_hours_kwargs(payload)
    )
    logger.info("Admin edited hours", admin_id=admin.id, user_id=user_id, date=payload.date)
    return {"status": "success", "user": user_public(stored, include_log=True)}


@admin_router.get("/profile")
def admin_profile(admin: User = Depends(require_admin)):
    return {"user": user_public(admin)}


@admin_router.post("/profile")
def admin_update_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    admin: User = Depends(require_admin),
):
    stored, message = request.app.state.profile_service.update_profile(
        admin.id, payload.name, payload.current_password, payload.new_password
    )
    return {"status": "success", "message": message, "user": user_public(stored)}
