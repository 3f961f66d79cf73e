from fastapi import Depends, Request
from sqlalchemy.orm import Session

from sundaystore.containers import Container
from sundaystore.database.session import get_db

# Services
from sundaystore.services.inventory_service import InventoryService
from sundaystore.services.order_service import OrderService
from sundaystore.services.points_adjustment_service import PointsAdjustmentService
from sundaystore.services.points_award_service import PointsAwardService
from sundaystore.services.points_config_service import PointsConfigService
from sundaystore.services.wallet_service import WalletService


def _container(request: Request) -> Container:
    return request.app.container  # type: ignore[attr-defined]


def get_wallet_service(
    request: Request, db: Session = Depends(get_db)
) -> WalletService:
    return _container(request).services.wallet_service(db=db)


def get_inventory_service(
    request: Request, db: Session = Depends(get_db)
) -> InventoryService:
    return _container(request).services.inventory_service(db=db)


def get_order_service(request: Request, db: Session = Depends(get_db)) -> OrderService:
    return _container(request).services.order_service(db=db)


def get_points_config_service(
    request: Request, db: Session = Depends(get_db)
) -> PointsConfigService:
    return _container(request).services.points_config_service(db=db)


def get_points_adjustment_service(
    request: Request, db: Session = Depends(get_db)
) -> PointsAdjustmentService:
    return _container(request).services.points_adjustment_service(db=db)


def get_points_award_service(
    request: Request, db: Session = Depends(get_db)
) -> PointsAwardService:
    return _container(request).services.points_award_service(db=db)
