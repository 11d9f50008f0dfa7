"""
Page routes for the user CRUD demo.

Form posts answer with redirects carrying ``success``/``error`` markers;
delete answers JSON for the page script. User ids must be 24 hex chars,
anything else does not match a route.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

import storefront.core.types  # noqa: F401  registers the objectid path convertor
from storefront.api.deps import get_user_service
from storefront.api.responses import error_marker, redirect_to, status_for_error
from storefront.core.logging_config import get_logger
from storefront.services import UserService
from storefront.validation import validate
from storefront.web.views import render_create_form, render_edit_form, render_user_list

logger = get_logger(__name__)

router = APIRouter(include_in_schema=False)


async def _form_payload(request: Request) -> Dict[str, Any]:
    """Submitted form fields; blank inputs count as not supplied"""
    form = await request.form()
    return {
        key: value.strip()
        for key, value in form.items()
        if isinstance(value, str) and value.strip() != ""
    }


@router.get("/", response_class=HTMLResponse)
@router.get("/crud", response_class=HTMLResponse)
async def home(success: Optional[str] = None, error: Optional[str] = None):
    return HTMLResponse(render_create_form(success=success, error=error))


@router.get("/users", response_class=HTMLResponse)
async def display_all_users(
    success: Optional[str] = None,
    error: Optional[str] = None,
    service: UserService = Depends(get_user_service)
):
    result = await service.get_all_users()
    if not result.success:
        return HTMLResponse(render_user_list([], error=error_marker(result.error)))
    return HTMLResponse(render_user_list(result.data, success=success, error=error))


@router.post("/create-user")
async def create_user(request: Request, service: UserService = Depends(get_user_service)):
    validation = validate("user.register", await _form_payload(request))
    if not validation.is_valid:
        logger.info(f"Create-user form rejected: {[error.field for error in validation.errors]}")
        return redirect_to("/crud", error="validation_failed")

    result = await service.create_new_user(validation.data)
    if result.success:
        return redirect_to("/crud", success="user_created")
    return redirect_to("/crud", error=error_marker(result.error))


@router.get("/edit-user/{user_id:objectid}", response_class=HTMLResponse)
async def edit_user_page(
    user_id: str,
    error: Optional[str] = None,
    service: UserService = Depends(get_user_service)
):
    result = await service.get_user_by_id(user_id)
    if not result.success:
        return redirect_to("/users", error=error_marker(result.error))
    return HTMLResponse(render_edit_form(result.data, error=error))


@router.post("/update-user/{user_id:objectid}")
async def update_user(
    user_id: str,
    request: Request,
    service: UserService = Depends(get_user_service)
):
    validation = validate("user.update", await _form_payload(request))
    if not validation.is_valid:
        return redirect_to(f"/edit-user/{user_id}", error="validation_failed")

    result = await service.update_user(user_id, validation.data)
    if result.success:
        return redirect_to("/users", success="user_updated")
    return redirect_to(f"/edit-user/{user_id}", error=error_marker(result.error))


@router.delete("/delete-user/{user_id:objectid}")
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    result = await service.delete_user(user_id)
    status_code = 200 if result.success else status_for_error(result.error)
    return JSONResponse(
        status_code=status_code,
        content={"success": result.success, "message": result.message},
    )
