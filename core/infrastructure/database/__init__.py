"""Database infrastructure: settings, engine, models, repositories."""
from .config import (
    DatabaseSettings,
    close_database,
    create_engine,
    get_engine,
    get_session_factory,
    init_database,
)
from .models import Base, OrderItemModel, OrderModel

__all__ = [
    "Base",
    "DatabaseSettings",
    "OrderItemModel",
    "OrderModel",
    "close_database",
    "create_engine",
    "get_engine",
    "get_session_factory",
    "init_database",
]
