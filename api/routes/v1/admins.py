"""
api/routes/v1/admins.py -- Admin account management (superadmin only).

Routes:
  GET    /api/v1/admins             -- list every account as {id, email, role, club_id}
  POST   /api/v1/admins             -- provision a club admin; returns a one-time password
  DELETE /api/v1/admins/{admin_id}  -- delete a club admin (never a superadmin)

Every route is gated by require_superadmin at router level.

Provisioning:
  The new admin gets a random temporary password, returned ONCE in the 201
  response and stored only as a bcrypt hash. The account row and its club
  binding are written as two separate statements.

Deletion:
  Superadmin targets are refused here (403) AND by the store's WHERE clause,
  so the guard holds even if this check is bypassed.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import AdminCreate, AdminCreatedResponse, AdminResponse, ErrorDetail
from auth.dependencies import require_superadmin
from auth.models import Identity, Role
from auth.store import AccountStore
from auth.tokens import generate_temporary_password, hash_password

logger = logging.getLogger("clubsite.api")

router = APIRouter(dependencies=[Depends(require_superadmin)])


@router.get("/admins", response_model=list[AdminResponse])
def list_admins(request: Request) -> list[AdminResponse]:
    """List all accounts with their derived role and club scope."""
    store: AccountStore = request.app.state.account_store
    return [AdminResponse.from_account(a) for a in store.list_accounts()]


@router.post("/admins", response_model=AdminCreatedResponse, status_code=201)
def create_admin(
    request: Request,
    body: AdminCreate,
    identity: Identity = Depends(require_superadmin),
) -> AdminCreatedResponse:
    """Create a regular admin bound to one club."""
    store: AccountStore = request.app.state.account_store
    temporary_password = generate_temporary_password()
    try:
        admin_id = store.create_admin(body.email, hash_password(temporary_password), body.club_id)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=409,
            detail=ErrorDetail(code="conflict", message="An account with that email already exists.").model_dump(),
        ) from exc

    logger.info("Admin id=%s created for club=%s by user_id=%s", admin_id, body.club_id, identity.id)
    return AdminCreatedResponse(
        id=admin_id,
        email=body.email,
        role=Role.ADMIN,
        club_id=body.club_id,
        temporary_password=temporary_password,
    )


@router.delete("/admins/{admin_id}", status_code=204)
def delete_admin(
    request: Request,
    admin_id: int = Path(gt=0),
    identity: Identity = Depends(require_superadmin),
) -> Response:
    """Delete a regular admin. Superadmin accounts can never be deleted."""
    store: AccountStore = request.app.state.account_store
    target = store.get_by_id(admin_id)
    if target is not None and target.is_superadmin:
        logger.warning("Refused deletion of superadmin id=%s requested by user_id=%s", admin_id, identity.id)
        raise HTTPException(
            status_code=403,
            detail=ErrorDetail(
                code="superadmin_protected",
                message="Superadmin accounts cannot be deleted.",
            ).model_dump(),
        )
    if target is None or not store.delete_admin(admin_id):
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(code="not_found", message="Admin not found.").model_dump(),
        )
    logger.info("Admin id=%s deleted by user_id=%s", admin_id, identity.id)
    return Response(status_code=204)
