"""
SQLAlchemy models for Monnayeur persistence.

Table and column names follow the deployed store so the migrator can
recognise its earlier shapes.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from monnayeur.utils.clock import utc_now

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class UTCDateTime(TypeDecorator):
    """
    Naive UTC timestamp stored as sortable text.

    Rows written by older builds hold integer epoch seconds; those are
    read back as datetimes too.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            return value.strftime(TIMESTAMP_FORMAT)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, timezone.utc).replace(tzinfo=None)
        if isinstance(value, str) and value.isdigit():
            return datetime.fromtimestamp(int(value), timezone.utc).replace(
                tzinfo=None
            )
        return datetime.fromisoformat(value)


class Base(DeclarativeBase):
    """Base class for all models."""


class UserModel(Base):
    """User database model - reachable by chat id or social id."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    telegram_id: Mapped[int | None] = mapped_column(Integer)
    farcaster_fid: Mapped[int | None] = mapped_column(Integer)
    username: Mapped[str | None] = mapped_column(Text)
    wallet_address: Mapped[str | None] = mapped_column(Text)
    nfts_minted: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    last_mint_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    platform: Mapped[str] = mapped_column(
        String(20), nullable=False, default="telegram", server_default="telegram"
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    # Relationships
    nfts: Mapped[list["MintedAssetModel"]] = relationship(
        "MintedAssetModel",
        back_populates="owner",
        lazy="select",
    )

    __table_args__ = (
        CheckConstraint(
            "telegram_id IS NOT NULL OR farcaster_fid IS NOT NULL",
            name="ck_users_platform_identity",
        ),
        Index(
            "idx_users_telegram_unique",
            "telegram_id",
            unique=True,
            sqlite_where=text("telegram_id IS NOT NULL"),
        ),
        Index(
            "idx_users_farcaster_unique",
            "farcaster_fid",
            unique=True,
            sqlite_where=text("farcaster_fid IS NOT NULL"),
        ),
        Index("idx_users_wallet", "wallet_address"),
    )


class MintedAssetModel(Base):
    """Minted NFT database model - append-only."""

    __tablename__ = "nfts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_id: Mapped[int] = mapped_column(Integer, nullable=False)
    owner_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    owner_wallet_address: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_uri: Mapped[str] = mapped_column(Text, nullable=False)
    transaction_hash: Mapped[str] = mapped_column(Text, nullable=False)
    block_number: Mapped[int | None] = mapped_column(Integer)
    platform: Mapped[str] = mapped_column(
        String(20), nullable=False, default="telegram", server_default="telegram"
    )
    minted_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    # Relationships
    owner: Mapped["UserModel"] = relationship("UserModel", back_populates="nfts")

    __table_args__ = (
        Index("idx_nfts_owner", "owner_user_id"),
        Index("idx_nfts_token_id", "token_id"),
        # One row per on-chain mint; concurrent confirmations collide here
        Index(
            "idx_nfts_token_tx_unique", "token_id", "transaction_hash", unique=True
        ),
    )


class SessionModel(Base):
    """Webapp bridging session database model."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    telegram_id: Mapped[int] = mapped_column(Integer, nullable=False)
    wallet_address: Mapped[str | None] = mapped_column(Text)
    data: Mapped[str | None] = mapped_column(Text)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    __table_args__ = (
        Index("idx_sessions_expires", "expires_at"),
        Index("idx_sessions_telegram_id", "telegram_id"),
    )


class SchemaVersionModel(Base):
    """Applied migration level marker (single row)."""

    __tablename__ = "schema_version"

    version: Mapped[int] = mapped_column(Integer, primary_key=True)
