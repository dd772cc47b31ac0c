"""SQLAlchemy models for installation auth data and provider configuration."""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Provider(str, enum.Enum):
    """Supported payment providers."""
    JUSPAY = "juspay"
    HYPERSWITCH = "hyperswitch"


class Environment(str, enum.Enum):
    TEST = "test"
    LIVE = "live"


class InstallationAuth(Base):
    """Stored authentication context of one ledger installation."""
    __tablename__ = "installation_auth"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    saleor_api_url: Mapped[str] = mapped_column(String(512), nullable=False, unique=True, index=True)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    app_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProviderConfiguration(Base):
    """Provider credentials configured for one channel of an installation."""
    __tablename__ = "provider_configurations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    saleor_api_url: Mapped[str] = mapped_column(String(512), nullable=False)
    channel_id: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    environment: Mapped[str] = mapped_column(String(10), nullable=False, default=Environment.TEST.value)

    # API credentials
    api_key: Mapped[str] = mapped_column(Text, nullable=False)
    merchant_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    profile_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Basic auth credentials sent by the provider on webhooks
    username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("saleor_api_url", "channel_id", "provider", name="uq_provider_configuration_channel"),
        Index("ix_provider_configurations_saleor_api_url", "saleor_api_url"),
    )
