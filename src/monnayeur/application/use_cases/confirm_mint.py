"""
Confirm mint use case.

Handles the mint-confirmed callback: resolves the minting user and records
the asset together with the counter increment.
"""

from dataclasses import dataclass
from typing import Optional

from monnayeur.application.dto.mint_dto import CallbackResult, CallbackStatus
from monnayeur.domain.entities.user import User
from monnayeur.domain.exceptions import (
    ConstraintViolationError,
    EntityNotFoundError,
    SessionExpiredError,
)
from monnayeur.domain.repositories.i_identity_store import IIdentityStore
from monnayeur.domain.repositories.i_session_store import ISessionStore
from monnayeur.domain.value_objects.platform import Platform
from monnayeur.infrastructure.monitoring import metrics
from monnayeur.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ConfirmMintCommand:
    """Command to record a confirmed mint."""

    token_id: int
    transaction_ref: str
    wallet_address: str
    metadata_locator: str = ""
    block_height: Optional[int] = None
    origin_platform: Optional[Platform] = None
    session_id: Optional[str] = None
    social_id: Optional[int] = None
    display_name: Optional[str] = None


class ConfirmMint:
    """
    Use case for the mint-confirmed callback.

    Business rules:
    - The user is resolved by session, then social id, then wallet
    - The wallet used to mint becomes the user's current wallet
    - A (token id, transaction) pair is recorded at most once
    - Eligibility is not re-checked: the mint already happened on chain
    """

    def __init__(self, identity_store: IIdentityStore, session_store: ISessionStore):
        """
        Initialize use case.

        Args:
            identity_store: Identity store
            session_store: Session store
        """
        self.identity_store = identity_store
        self.session_store = session_store

    async def execute(self, command: ConfirmMintCommand) -> CallbackResult:
        """
        Record a confirmed mint.

        Args:
            command: Mint confirmation payload

        Returns:
            CallbackResult (RECORDED, DUPLICATE, SESSION_EXPIRED,
            UNKNOWN_USER or CONSTRAINT_VIOLATION)
        """
        duplicate = await self._find_duplicate(command)
        if duplicate is not None:
            return duplicate

        if command.session_id:
            session = await self.session_store.resolve(command.session_id)
            if session is None:
                return CallbackResult(
                    status=CallbackStatus.SESSION_EXPIRED,
                    message="Session expired or not found",
                )
            user = await self.identity_store.resolve_by_chat_id(session.owner_chat_id)
            default_platform = Platform.TELEGRAM
        elif command.social_id is not None:
            internal_id = await self.identity_store.upsert_by_social_id(
                command.social_id,
                command.display_name or f"fc_{command.social_id}",
            )
            user = await self.identity_store.resolve_by_internal_id(internal_id)
            default_platform = Platform.FARCASTER
        else:
            user = await self.identity_store.resolve_by_wallet(command.wallet_address)
            default_platform = user.platform if user else Platform.TELEGRAM

        if user is None:
            return CallbackResult(
                status=CallbackStatus.UNKNOWN_USER,
                message="Minting user could not be identified",
            )

        platform = command.origin_platform or default_platform
        return await self._record(command, user, platform)

    async def _find_duplicate(
        self, command: ConfirmMintCommand
    ) -> Optional[CallbackResult]:
        existing = await self.identity_store.find_asset(
            command.token_id, command.transaction_ref
        )
        if existing is None:
            return None

        user = await self.identity_store.resolve_by_internal_id(existing.owner_id)
        return CallbackResult(
            status=CallbackStatus.DUPLICATE,
            message="Mint already recorded",
            user=user,
            asset=existing,
        )

    async def _record(
        self, command: ConfirmMintCommand, user: User, platform: Platform
    ) -> CallbackResult:
        try:
            if command.session_id:
                await self.session_store.attach_wallet(
                    command.session_id, command.wallet_address
                )
            await self.identity_store.attach_wallet(user.id, command.wallet_address)
            asset = await self.identity_store.record_mint(
                internal_id=user.id,
                token_id=command.token_id,
                wallet_address=command.wallet_address,
                metadata_locator=command.metadata_locator,
                transaction_ref=command.transaction_ref,
                block_height=command.block_height,
                origin_platform=platform,
            )
        except SessionExpiredError:
            return CallbackResult(
                status=CallbackStatus.SESSION_EXPIRED,
                message="Session expired or not found",
            )
        except EntityNotFoundError:
            return CallbackResult(
                status=CallbackStatus.UNKNOWN_USER,
                message="Minting user could not be identified",
            )
        except ConstraintViolationError as e:
            # A concurrent confirmation of the same mint won the insert
            duplicate = await self._find_duplicate(command)
            if duplicate is not None:
                return duplicate

            logger.error(
                f"Mint record rejected for user {user.id}: {e.message}",
                extra={"operation": "confirm_mint", "user_id": user.id},
            )
            return CallbackResult(
                status=CallbackStatus.CONSTRAINT_VIOLATION,
                message=e.message,
                user=user,
            )

        metrics.mints_recorded_total.labels(platform=platform.value).inc()

        updated = await self.identity_store.resolve_by_internal_id(user.id)
        return CallbackResult(
            status=CallbackStatus.RECORDED,
            message="NFT minted successfully",
            user=updated,
            asset=asset,
        )
