"""
Unit tests for ConnectWallet and GetUserCollection use cases.

Usage:
    pytest tests/unit/application/test_connect_wallet.py
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from monnayeur.application.dto.mint_dto import CallbackStatus
from monnayeur.application.use_cases.connect_wallet import (
    ConnectWallet,
    ConnectWalletCommand,
)
from monnayeur.application.use_cases.get_user_collection import (
    GetUserCollection,
    GetUserCollectionQuery,
)
from monnayeur.domain.entities.bridge_session import BridgeSession
from monnayeur.domain.entities.user import User
from monnayeur.domain.exceptions import SessionExpiredError, ValidationError

NOW = datetime(2024, 6, 1, 12, 0, 0)


class TestConnectWallet:
    """Unit tests for ConnectWallet use case."""

    async def test_session_flow(self):
        """Test the wallet is stored on both session and user."""
        user = User(id=1, chat_id=111)
        identity_store = AsyncMock()
        session_store = AsyncMock()
        session_store.resolve.return_value = BridgeSession(
            token="token-1", owner_chat_id=111, expires_at=NOW + timedelta(hours=1)
        )
        identity_store.resolve_by_chat_id.return_value = user
        identity_store.attach_wallet.return_value = User(
            id=1, chat_id=111, wallet_address="0xABC"
        )

        result = await ConnectWallet(identity_store, session_store).execute(
            ConnectWalletCommand(wallet_address="0xABC", session_id="token-1")
        )

        # Assertions
        assert result.status == CallbackStatus.CONNECTED
        assert result.user.wallet_address == "0xABC"
        session_store.attach_wallet.assert_called_once_with("token-1", "0xABC")
        identity_store.attach_wallet.assert_called_once_with(1, "0xABC")

    async def test_expired_session(self):
        """Test an expired session leaves the user untouched."""
        identity_store = AsyncMock()
        session_store = AsyncMock()
        session_store.resolve.return_value = None

        result = await ConnectWallet(identity_store, session_store).execute(
            ConnectWalletCommand(wallet_address="0xABC", session_id="gone")
        )

        assert result.status == CallbackStatus.SESSION_EXPIRED
        identity_store.attach_wallet.assert_not_called()

    async def test_session_expires_on_write(self):
        """Test expiry detected on attach is reported."""
        identity_store = AsyncMock()
        session_store = AsyncMock()
        session_store.resolve.return_value = BridgeSession(
            token="token-1", owner_chat_id=111, expires_at=NOW
        )
        identity_store.resolve_by_chat_id.return_value = User(id=1, chat_id=111)
        session_store.attach_wallet.side_effect = SessionExpiredError("token-1")

        result = await ConnectWallet(identity_store, session_store).execute(
            ConnectWalletCommand(wallet_address="0xABC", session_id="token-1")
        )

        assert result.status == CallbackStatus.SESSION_EXPIRED

    async def test_social_flow_default_name(self):
        """Test a social user without a name gets fc_<id>."""
        identity_store = AsyncMock()
        identity_store.upsert_by_social_id.return_value = 9
        identity_store.attach_wallet.return_value = User(
            id=9, social_id=4242, wallet_address="0xABC"
        )

        result = await ConnectWallet(identity_store, AsyncMock()).execute(
            ConnectWalletCommand(wallet_address="0xABC", social_id=4242)
        )

        assert result.status == CallbackStatus.CONNECTED
        identity_store.upsert_by_social_id.assert_called_once_with(4242, "fc_4242")
        identity_store.attach_wallet.assert_called_once_with(9, "0xABC")

    async def test_wallet_only_unknown(self):
        """Test a wallet with no owner yields UNKNOWN_USER."""
        identity_store = AsyncMock()
        identity_store.resolve_by_wallet.return_value = None

        result = await ConnectWallet(identity_store, AsyncMock()).execute(
            ConnectWalletCommand(wallet_address="0xABC")
        )

        assert result.status == CallbackStatus.UNKNOWN_USER


class TestGetUserCollection:
    """Unit tests for GetUserCollection use case."""

    async def test_unknown_user_empty_summary(self):
        """Test an unknown chat id yields an empty summary."""
        identity_store = AsyncMock()
        identity_store.resolve_by_chat_id.return_value = None

        summary = await GetUserCollection(identity_store).execute(
            GetUserCollectionQuery(chat_id=111)
        )

        assert summary.user is None
        assert summary.assets == []
        identity_store.list_assets.assert_not_called()

    async def test_no_identifier(self):
        """Test a query without any identifier is rejected."""
        identity_store = AsyncMock()

        with pytest.raises(ValidationError):
            await GetUserCollection(identity_store).execute(GetUserCollectionQuery())

        identity_store.resolve_by_wallet.assert_not_called()

    async def test_known_user(self):
        """Test counts and assets are returned for a known user."""
        user = User(id=1, chat_id=111, minted_count=2)
        identity_store = AsyncMock()
        identity_store.resolve_by_social_id.return_value = user
        identity_store.list_assets.return_value = []
        identity_store.count_assets.return_value = 2

        summary = await GetUserCollection(identity_store).execute(
            GetUserCollectionQuery(social_id=4242)
        )

        assert summary.minted_count == 2
        assert summary.asset_count == 2
        identity_store.list_assets.assert_called_once_with(1)
