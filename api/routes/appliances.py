"""
api/routes/appliances.py -- Appliance CRUD routes.

Routes:
  POST   /eletronicos        -- create appliance (201 + record)
  GET    /eletronicos        -- list all appliances
  GET    /eletronicos/{id}   -- one appliance, 404 if absent
  PUT    /eletronicos/{id}   -- full replace, 404 if absent
  DELETE /eletronicos/{id}   -- hard delete, 404 if absent

Auth: every route requires a valid bearer token (router-level dependency).
Roles are NOT checked -- any authenticated user may call any route here.

Handlers are plain `def` so FastAPI runs them in its threadpool; the store
calls block on SQLite I/O and must not run on the event loop.
"""

import logging

from fastapi import APIRouter, Depends, Request

from api.models import ApplianceIn, ApplianceOut, MessageResponse
from auth.dependencies import require_session
from core.errors import NotFoundError
from inventory.store import ApplianceStore

logger = logging.getLogger("appliance_tracker.api")

# Router-level dependency applies to every route registered on this router,
# so the token is checked before any handler touches the store.
router = APIRouter(dependencies=[Depends(require_session)])

_NOT_FOUND = "Appliance not found."


def _actor(request: Request) -> str:
    return request.state.session.username


@router.post("/eletronicos", response_model=ApplianceOut, status_code=201)
def create_appliance(request: Request, body: ApplianceIn) -> ApplianceOut:
    """Register a new appliance. The store assigns the id."""
    store: ApplianceStore = request.app.state.appliances
    created = store.create(body.to_domain())
    logger.info("Appliance %d created by %s", created.id, _actor(request))
    return ApplianceOut.from_domain(created)


@router.get("/eletronicos", response_model=list[ApplianceOut])
def list_appliances(request: Request) -> list[ApplianceOut]:
    """Return every appliance."""
    store: ApplianceStore = request.app.state.appliances
    return [ApplianceOut.from_domain(a) for a in store.list_all()]


@router.get("/eletronicos/{appliance_id}", response_model=ApplianceOut)
def get_appliance(request: Request, appliance_id: int) -> ApplianceOut:
    store: ApplianceStore = request.app.state.appliances
    appliance = store.get(appliance_id)
    if appliance is None:
        raise NotFoundError(_NOT_FOUND)
    return ApplianceOut.from_domain(appliance)


@router.put("/eletronicos/{appliance_id}", response_model=MessageResponse)
def update_appliance(request: Request, appliance_id: int, body: ApplianceIn) -> MessageResponse:
    """Replace all fields of an appliance. Omitted fields become null."""
    store: ApplianceStore = request.app.state.appliances
    if not store.update(appliance_id, body.to_domain()):
        raise NotFoundError(_NOT_FOUND)
    logger.info("Appliance %d updated by %s", appliance_id, _actor(request))
    return MessageResponse(message="Appliance updated successfully.")


@router.delete("/eletronicos/{appliance_id}", response_model=MessageResponse)
def delete_appliance(request: Request, appliance_id: int) -> MessageResponse:
    store: ApplianceStore = request.app.state.appliances
    if not store.delete(appliance_id):
        raise NotFoundError(_NOT_FOUND)
    logger.info("Appliance %d deleted by %s", appliance_id, _actor(request))
    return MessageResponse(message="Appliance removed successfully.")
