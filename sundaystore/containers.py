from dependency_injector import containers, providers

from sundaystore.config import Settings
from sundaystore.services.inventory_service import InventoryService
from sundaystore.services.order_service import OrderService
from sundaystore.services.points_adjustment_service import PointsAdjustmentService
from sundaystore.services.points_award_service import PointsAwardService
from sundaystore.services.points_config_service import PointsConfigService
from sundaystore.services.wallet_service import WalletService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer. The request session is passed in as ``db`` at call time."""

    config = providers.DependenciesContainer()

    wallet_service = providers.Factory(WalletService, settings=config.config)
    inventory_service = providers.Factory(InventoryService)
    order_service = providers.Factory(OrderService, settings=config.config)
    points_config_service = providers.Factory(PointsConfigService, settings=config.config)
    points_adjustment_service = providers.Factory(
        PointsAdjustmentService, settings=config.config
    )
    points_award_service = providers.Factory(PointsAwardService, settings=config.config)


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    services = providers.Container(ServiceModule, config=config)
