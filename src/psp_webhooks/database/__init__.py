"""Persistence of installation auth data and channel provider configuration."""

from .models import Base, Environment, InstallationAuth, Provider, ProviderConfiguration
from .repository import InstallationAuthRepository, ProviderConfigurationRepository
from .session import (
    close_db,
    create_async_engine,
    get_async_session_factory,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "Environment",
    "InstallationAuth",
    "Provider",
    "ProviderConfiguration",
    "InstallationAuthRepository",
    "ProviderConfigurationRepository",
    "close_db",
    "create_async_engine",
    "get_async_session_factory",
    "get_db",
    "init_db",
]
