"""
Store catalog API router

- GET   /store/items, /store/items/{item_id}: catalog (any actor)
- POST  /store/items: new item (managers)
- PATCH /store/items/{item_id}: catalog fields, never stock (managers)
- POST  /store/items/{item_id}/restock: add stock (managers)
- GET   /store/items/{item_id}/movements: stock audit trail (managers)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from sundaystore.core.auth_middleware import get_current_actor, require_manager
from sundaystore.deps import get_inventory_service
from sundaystore.schemas.actor import Actor
from sundaystore.schemas.store import (
    RestockRequest,
    StockMovementEntry,
    StoreCatalogResponse,
    StoreItemCreateRequest,
    StoreItemResponse,
    StoreItemUpdateRequest,
)
from sundaystore.services.inventory_service import InventoryService

router = APIRouter(prefix="/store", tags=["store"])


@router.get("/items", response_model=StoreCatalogResponse)
def list_items(
    store_id: Optional[int] = Query(None, gt=0),
    include_inactive: bool = Query(False, description="Managers only"),
    actor: Actor = Depends(get_current_actor),
    inventory_service: InventoryService = Depends(get_inventory_service),
) -> StoreCatalogResponse:
    active_only = not (include_inactive and actor.is_manager)
    return inventory_service.list_catalog(store_id=store_id, active_only=active_only)


@router.get("/items/{item_id}", response_model=StoreItemResponse)
def get_item(
    item_id: int = Path(..., gt=0),
    actor: Actor = Depends(get_current_actor),
    inventory_service: InventoryService = Depends(get_inventory_service),
) -> StoreItemResponse:
    return inventory_service.get_item(item_id)


@router.post("/items", response_model=StoreItemResponse, status_code=201)
def create_item(
    request: StoreItemCreateRequest,
    actor: Actor = Depends(require_manager),
    inventory_service: InventoryService = Depends(get_inventory_service),
) -> StoreItemResponse:
    return inventory_service.create_item(request, actor_id=actor.id)


@router.patch("/items/{item_id}", response_model=StoreItemResponse)
def update_item(
    request: StoreItemUpdateRequest,
    item_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_manager),
    inventory_service: InventoryService = Depends(get_inventory_service),
) -> StoreItemResponse:
    return inventory_service.update_item(item_id, request)


@router.post("/items/{item_id}/restock", response_model=StoreItemResponse)
def restock_item(
    request: RestockRequest,
    item_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_manager),
    inventory_service: InventoryService = Depends(get_inventory_service),
) -> StoreItemResponse:
    return inventory_service.restock(item_id, request.quantity, actor_id=actor.id)


@router.get("/items/{item_id}/movements", response_model=List[StockMovementEntry])
def list_movements(
    item_id: int = Path(..., gt=0),
    limit: int = Query(100, ge=1, le=100),
    actor: Actor = Depends(require_manager),
    inventory_service: InventoryService = Depends(get_inventory_service),
) -> List[StockMovementEntry]:
    return inventory_service.list_movements(item_id, limit=limit)
