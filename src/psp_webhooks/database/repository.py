"""Repository layer for installation auth and provider configuration lookups."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..logging_utils import redact_log_value
from .models import InstallationAuth, ProviderConfiguration

logger = logging.getLogger(__name__)


class InstallationAuthRepository:
    """Repository for InstallationAuth records."""

    def __init__(self, session: AsyncSession):
        """Initialize the repository with a database session.

        Args:
            session: AsyncSession instance for database operations.
        """
        self.session = session

    async def get(self, saleor_api_url: str) -> Optional[InstallationAuth]:
        """Get the auth data stored for a ledger installation.

        Args:
            saleor_api_url: Ledger API URL identifying the installation.

        Returns:
            InstallationAuth if the installation is registered, None otherwise.
        """
        result = await self.session.execute(
            select(InstallationAuth).where(InstallationAuth.saleor_api_url == saleor_api_url)
        )
        return result.scalar_one_or_none()

    async def set(
        self,
        saleor_api_url: str,
        token: str,
        app_id: Optional[str] = None,
    ) -> InstallationAuth:
        """Create or replace the auth data of an installation."""
        auth = await self.get(saleor_api_url)
        if auth is None:
            auth = InstallationAuth(saleor_api_url=saleor_api_url, token=token, app_id=app_id)
            self.session.add(auth)
        else:
            auth.token = token
            auth.app_id = app_id
            auth.updated_at = datetime.utcnow()
        await self.session.flush()
        logger.info(f"Stored auth data for {saleor_api_url} (token {redact_log_value(token)})")
        return auth

    async def delete(self, saleor_api_url: str) -> bool:
        """Delete the auth data of an installation.

        Returns:
            True if a record was deleted.
        """
        auth = await self.get(saleor_api_url)
        if auth is None:
            return False
        await self.session.delete(auth)
        await self.session.flush()
        logger.info(f"Deleted auth data for {saleor_api_url}")
        return True


class ProviderConfigurationRepository:
    """Repository for channel-scoped ProviderConfiguration records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_channel(
        self,
        saleor_api_url: str,
        channel_id: str,
        provider: str,
    ) -> Optional[ProviderConfiguration]:
        """Get the provider configuration of a channel.

        Args:
            saleor_api_url: Ledger API URL identifying the installation.
            channel_id: Ledger channel identifier.
            provider: Provider name.

        Returns:
            ProviderConfiguration if configured, None otherwise.
        """
        result = await self.session.execute(
            select(ProviderConfiguration).where(
                ProviderConfiguration.saleor_api_url == saleor_api_url,
                ProviderConfiguration.channel_id == channel_id,
                ProviderConfiguration.provider == provider,
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        saleor_api_url: str,
        channel_id: str,
        provider: str,
        api_key: str,
        environment: str = "test",
        merchant_id: Optional[str] = None,
        profile_id: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> ProviderConfiguration:
        """Create or update the provider configuration of a channel."""
        config = await self.get_for_channel(saleor_api_url, channel_id, provider)
        if config is None:
            config = ProviderConfiguration(
                saleor_api_url=saleor_api_url,
                channel_id=channel_id,
                provider=provider,
            )
            self.session.add(config)

        config.api_key = api_key
        config.environment = environment
        config.merchant_id = merchant_id
        config.profile_id = profile_id
        config.username = username
        config.password = password
        config.updated_at = datetime.utcnow()
        await self.session.flush()

        logger.info(
            f"Stored {provider} configuration for channel {channel_id} "
            f"(api key {redact_log_value(api_key)})"
        )
        return config
