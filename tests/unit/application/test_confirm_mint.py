"""
Unit tests for ConfirmMint use case.

Tests user resolution order, idempotency and error mapping.

Usage:
    pytest tests/unit/application/test_confirm_mint.py
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

from monnayeur.application.dto.mint_dto import CallbackStatus
from monnayeur.application.use_cases.confirm_mint import (
    ConfirmMint,
    ConfirmMintCommand,
)
from monnayeur.domain.entities.bridge_session import BridgeSession
from monnayeur.domain.entities.minted_asset import MintedAsset
from monnayeur.domain.entities.user import User
from monnayeur.domain.exceptions import (
    ConstraintViolationError,
    EntityNotFoundError,
    SessionExpiredError,
)
from monnayeur.domain.value_objects.platform import Platform

NOW = datetime(2024, 6, 1, 12, 0, 0)
WALLET = "0xABC"


class TestConfirmMint:
    """Unit tests for ConfirmMint use case."""

    # ================================================================
    # Helper Methods
    # ================================================================

    def _asset(self, owner_id: int = 1, platform=Platform.TELEGRAM) -> MintedAsset:
        return MintedAsset(
            id=1,
            token_id=7,
            owner_id=owner_id,
            owner_wallet_address=WALLET,
            metadata_locator="ipfs://meta/7",
            transaction_ref="0xtx",
            origin_platform=platform,
        )

    def _stores(self, user: User = None):
        identity_store = AsyncMock()
        session_store = AsyncMock()

        identity_store.find_asset.return_value = None
        identity_store.resolve_by_chat_id.return_value = user
        identity_store.resolve_by_internal_id.return_value = user
        identity_store.resolve_by_wallet.return_value = user
        identity_store.record_mint.return_value = self._asset(
            owner_id=user.id if user else 1
        )
        session_store.resolve.return_value = BridgeSession(
            token="token-1",
            owner_chat_id=111,
            expires_at=NOW + timedelta(hours=1),
        )

        return identity_store, session_store

    def _command(self, **overrides) -> ConfirmMintCommand:
        values = {
            "token_id": 7,
            "transaction_ref": "0xtx",
            "wallet_address": WALLET,
            "metadata_locator": "ipfs://meta/7",
        }
        values.update(overrides)
        return ConfirmMintCommand(**values)

    # ================================================================
    # Session flow
    # ================================================================

    async def test_session_flow_records_mint(self):
        """Test a live session resolves its owner and records the mint."""
        user = User(id=1, chat_id=111)
        identity_store, session_store = self._stores(user)
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="token-1"))

        # Assertions
        assert result.status == CallbackStatus.RECORDED
        assert result.status.is_success
        session_store.attach_wallet.assert_called_once_with("token-1", WALLET)
        identity_store.attach_wallet.assert_called_once_with(1, WALLET)
        kwargs = identity_store.record_mint.call_args.kwargs
        assert kwargs["internal_id"] == 1
        assert kwargs["token_id"] == 7
        assert kwargs["origin_platform"] == Platform.TELEGRAM

    async def test_expired_session(self):
        """Test an unknown or expired session records nothing."""
        identity_store, session_store = self._stores(User(id=1, chat_id=111))
        session_store.resolve.return_value = None
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="gone"))

        assert result.status == CallbackStatus.SESSION_EXPIRED
        identity_store.record_mint.assert_not_called()

    async def test_session_expires_between_read_and_write(self):
        """Test expiry detected on the wallet attach is reported."""
        identity_store, session_store = self._stores(User(id=1, chat_id=111))
        session_store.attach_wallet.side_effect = SessionExpiredError("token-1")
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="token-1"))

        assert result.status == CallbackStatus.SESSION_EXPIRED
        identity_store.record_mint.assert_not_called()

    # ================================================================
    # Social and wallet flows
    # ================================================================

    async def test_social_flow_upserts_user(self):
        """Test a social id creates the user and defaults the platform."""
        user = User(id=5, social_id=4242, platform=Platform.FARCASTER)
        identity_store, session_store = self._stores(user)
        identity_store.upsert_by_social_id.return_value = 5
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(social_id=4242))

        assert result.status == CallbackStatus.RECORDED
        identity_store.upsert_by_social_id.assert_called_once_with(4242, "fc_4242")
        kwargs = identity_store.record_mint.call_args.kwargs
        assert kwargs["origin_platform"] == Platform.FARCASTER
        session_store.attach_wallet.assert_not_called()

    async def test_wallet_only_unknown_user(self):
        """Test a wallet nobody owns yields UNKNOWN_USER."""
        identity_store, session_store = self._stores(None)
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command())

        assert result.status == CallbackStatus.UNKNOWN_USER
        assert result.status.is_success is False
        identity_store.record_mint.assert_not_called()

    # ================================================================
    # Idempotency and failures
    # ================================================================

    async def test_duplicate_confirmation(self):
        """Test a (token, transaction) pair is recorded only once."""
        user = User(id=1, chat_id=111)
        identity_store, session_store = self._stores(user)
        identity_store.find_asset.return_value = self._asset()
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="token-1"))

        assert result.status == CallbackStatus.DUPLICATE
        assert result.asset.token_id == 7
        identity_store.record_mint.assert_not_called()
        session_store.resolve.assert_not_called()

    async def test_constraint_violation(self):
        """Test a rejected write is reported, not raised."""
        identity_store, session_store = self._stores(User(id=1, chat_id=111))
        identity_store.record_mint.side_effect = ConstraintViolationError(
            "record_mint", "FOREIGN KEY constraint failed"
        )
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="token-1"))

        assert result.status == CallbackStatus.CONSTRAINT_VIOLATION
        assert "FOREIGN KEY" in result.message

    async def test_lost_insert_race_is_duplicate(self):
        """Test a unique-index rejection after a concurrent insert."""
        identity_store, session_store = self._stores(User(id=1, chat_id=111))
        identity_store.find_asset.side_effect = [None, self._asset()]
        identity_store.record_mint.side_effect = ConstraintViolationError(
            "record_mint", "UNIQUE constraint failed: nfts.token_id"
        )
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="token-1"))

        assert result.status == CallbackStatus.DUPLICATE
        assert result.asset.token_id == 7
        assert identity_store.find_asset.call_count == 2

    async def test_user_vanished(self):
        """Test a user deleted before the write yields UNKNOWN_USER."""
        identity_store, session_store = self._stores(User(id=1, chat_id=111))
        identity_store.attach_wallet.side_effect = EntityNotFoundError("User", "1")
        use_case = ConfirmMint(identity_store, session_store)

        result = await use_case.execute(self._command(session_id="token-1"))

        assert result.status == CallbackStatus.UNKNOWN_USER
