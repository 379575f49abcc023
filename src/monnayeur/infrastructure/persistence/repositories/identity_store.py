"""
Identity store implementation using SQLAlchemy.
"""

from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from monnayeur.domain.entities.minted_asset import MintedAsset
from monnayeur.domain.entities.user import User
from monnayeur.domain.exceptions import (
    ConstraintViolationError,
    EntityNotFoundError,
)
from monnayeur.domain.repositories.i_identity_store import IIdentityStore
from monnayeur.domain.value_objects.platform import Platform
from monnayeur.infrastructure.monitoring.logger import get_logger
from monnayeur.infrastructure.persistence.models import (
    MintedAssetModel,
    UserModel,
)
from monnayeur.utils.clock import Clock, utc_now

logger = get_logger(__name__)


class IdentityStore(IIdentityStore):
    """
    SQLAlchemy implementation of the identity store.

    Users are keyed internally by a surrogate id and reachable through
    either platform id. The two namespaces are never merged: the same
    person arriving from both platforms owns two rows.
    """

    def __init__(self, session: AsyncSession, now_fn: Clock = utc_now):
        """
        Initialize store with database session.

        Args:
            session: SQLAlchemy async session
            now_fn: Clock used for every timestamp written
        """
        self.session = session
        self.now_fn = now_fn

    # ================================================================
    # Upserts
    # ================================================================

    async def upsert_by_chat_id(self, chat_id: int, display_name: Optional[str]) -> int:
        """
        Create a chat-platform user or refresh its display name.

        Args:
            chat_id: Chat-platform numeric id
            display_name: Latest display name (None keeps the stored one)

        Returns:
            Internal user id
        """
        return await self._upsert(
            UserModel.telegram_id, chat_id, display_name, Platform.TELEGRAM
        )

    async def upsert_by_social_id(
        self, social_id: int, display_name: Optional[str]
    ) -> int:
        """
        Create a social-platform user or refresh its display name.

        Args:
            social_id: Social-platform numeric id
            display_name: Latest display name (None keeps the stored one)

        Returns:
            Internal user id
        """
        return await self._upsert(
            UserModel.farcaster_fid, social_id, display_name, Platform.FARCASTER
        )

    async def _upsert(
        self,
        key_column,
        key_value: int,
        display_name: Optional[str],
        platform: Platform,
    ) -> int:
        """Insert-or-refresh keyed on a partial unique index."""
        now = self.now_fn()

        stmt = sqlite_insert(UserModel).values(
            {
                key_column.key: key_value,
                "username": display_name,
                "platform": platform.value,
                "nfts_minted": 0,
                "created_at": now,
                "updated_at": now,
            }
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[key_column],
            index_where=key_column.isnot(None),
            set_={
                # A missing display name keeps the stored one
                "username": func.coalesce(
                    stmt.excluded.username, UserModel.username
                ),
                "updated_at": stmt.excluded.updated_at,
            },
        )

        try:
            await self.session.execute(stmt)
        except IntegrityError as e:
            await self.session.rollback()
            raise ConstraintViolationError("upsert_user", str(e.orig)) from e

        result = await self.session.execute(
            select(UserModel.id).where(key_column == key_value)
        )
        return result.scalar_one()

    # ================================================================
    # Lookups
    # ================================================================

    async def resolve_by_chat_id(self, chat_id: int) -> Optional[User]:
        """
        Get user by chat-platform id.

        Args:
            chat_id: Chat-platform numeric id

        Returns:
            User entity if found, None otherwise
        """
        return await self._resolve_one(UserModel.telegram_id == chat_id)

    async def resolve_by_social_id(self, social_id: int) -> Optional[User]:
        """Get user by social-platform id."""
        return await self._resolve_one(UserModel.farcaster_fid == social_id)

    async def resolve_by_internal_id(self, internal_id: int) -> Optional[User]:
        """Get user by internal id."""
        return await self._resolve_one(UserModel.id == internal_id)

    async def resolve_by_wallet(self, wallet_address: str) -> Optional[User]:
        """
        Retrieve the user most recently written with a wallet address.

        Two users may share a wallet; the latest updated_at wins, then the
        highest internal id.
        """
        stmt = (
            select(UserModel)
            .where(UserModel.wallet_address == wallet_address)
            .order_by(UserModel.updated_at.desc(), UserModel.id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_user(model) if model else None

    async def _resolve_one(self, criterion) -> Optional[User]:
        stmt = (
            select(UserModel)
            .where(criterion)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_user(model) if model else None

    # ================================================================
    # Writes
    # ================================================================

    async def attach_wallet(self, internal_id: int, wallet_address: str) -> User:
        """
        Overwrite the user's wallet (last connected wallet wins).

        Raises:
            EntityNotFoundError: If user not found
        """
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == internal_id)
            .values(wallet_address=wallet_address, updated_at=self.now_fn())
        )

        if result.rowcount == 0:
            raise EntityNotFoundError("User", str(internal_id))

        user = await self.resolve_by_internal_id(internal_id)
        logger.info(
            f"Wallet attached to user {internal_id}",
            extra={"operation": "attach_wallet", "user_id": internal_id},
        )
        return user

    async def record_mint(
        self,
        internal_id: int,
        token_id: int,
        wallet_address: str,
        metadata_locator: str,
        transaction_ref: str,
        block_height: Optional[int] = None,
        origin_platform: Platform = Platform.TELEGRAM,
    ) -> MintedAsset:
        """
        Append a minted asset and bump the owner's counters.

        The asset insert and the counter update share the caller's
        transaction. On failure the whole session is rolled back, which
        also discards earlier writes of the same unit of work, so this must
        be the last write in its session. ConfirmMint relies on that: a
        losing concurrent confirmation drops its wallet update with it.

        Args:
            internal_id: Owner's internal user id
            token_id: On-chain token id
            wallet_address: Wallet that minted
            metadata_locator: Metadata URI
            transaction_ref: Transaction hash
            block_height: Block number, if known
            origin_platform: Platform the mint came from

        Returns:
            Recorded asset

        Raises:
            EntityNotFoundError: If user not found
            ConstraintViolationError: If the engine rejects either write,
                including a second row for one (token id, transaction)
        """
        owner = await self.session.execute(
            select(UserModel.id).where(UserModel.id == internal_id)
        )
        if owner.scalar_one_or_none() is None:
            raise EntityNotFoundError("User", str(internal_id))

        now = self.now_fn()
        model = MintedAssetModel(
            token_id=token_id,
            owner_user_id=internal_id,
            owner_wallet_address=wallet_address,
            metadata_uri=metadata_locator,
            transaction_hash=transaction_ref,
            block_number=block_height,
            platform=origin_platform.value,
            minted_at=now,
        )

        try:
            self.session.add(model)
            await self.session.flush()

            await self.session.execute(
                update(UserModel)
                .where(UserModel.id == internal_id)
                .values(
                    nfts_minted=UserModel.nfts_minted + 1,
                    last_mint_at=now,
                    updated_at=now,
                )
            )
        except IntegrityError as e:
            await self.session.rollback()
            raise ConstraintViolationError("record_mint", str(e.orig)) from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Mint recorded: token {token_id} for user {internal_id}",
            extra={"operation": "record_mint", "user_id": internal_id},
        )

        return self._to_asset(model)

    # ================================================================
    # Assets
    # ================================================================

    async def list_assets(self, internal_id: int) -> List[MintedAsset]:
        """
        List a user's assets.

        Args:
            internal_id: Owner's internal user id

        Returns:
            Assets ordered by mint time descending, then id descending
        """
        stmt = (
            select(MintedAssetModel)
            .where(MintedAssetModel.owner_user_id == internal_id)
            .order_by(MintedAssetModel.minted_at.desc(), MintedAssetModel.id.desc())
        )
        result = await self.session.execute(stmt)
        models = result.scalars().all()

        return [self._to_asset(model) for model in models]

    async def count_assets(self, internal_id: int) -> int:
        """Count asset rows owned by a user."""
        stmt = (
            select(func.count())
            .select_from(MintedAssetModel)
            .where(MintedAssetModel.owner_user_id == internal_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def find_asset(
        self, token_id: int, transaction_ref: str
    ) -> Optional[MintedAsset]:
        """
        Get the asset recorded for a token id and transaction.

        Args:
            token_id: On-chain token id
            transaction_ref: Transaction hash

        Returns:
            MintedAsset if recorded, None otherwise
        """
        stmt = (
            select(MintedAssetModel)
            .where(
                MintedAssetModel.token_id == token_id,
                MintedAssetModel.transaction_hash == transaction_ref,
            )
            .order_by(MintedAssetModel.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_asset(model) if model else None

    # ================================================================
    # Mapping
    # ================================================================

    def _to_user(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            chat_id=model.telegram_id,
            social_id=model.farcaster_fid,
            display_name=model.username,
            wallet_address=model.wallet_address,
            minted_count=model.nfts_minted or 0,
            last_mint_at=model.last_mint_at,
            platform=Platform(model.platform),
            created_at=model.created_at or model.updated_at or self.now_fn(),
            updated_at=model.updated_at or model.created_at or self.now_fn(),
        )

    def _to_asset(self, model: MintedAssetModel) -> MintedAsset:
        """Convert ORM model to domain entity."""
        return MintedAsset(
            id=model.id,
            token_id=model.token_id,
            owner_id=model.owner_user_id,
            owner_wallet_address=model.owner_wallet_address,
            metadata_locator=model.metadata_uri,
            transaction_ref=model.transaction_hash,
            block_height=model.block_number,
            origin_platform=Platform(model.platform),
            minted_at=model.minted_at,
        )
