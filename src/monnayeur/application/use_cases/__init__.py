"""Application use cases."""

from monnayeur.application.use_cases.confirm_mint import (
    ConfirmMint,
    ConfirmMintCommand,
)
from monnayeur.application.use_cases.connect_wallet import (
    ConnectWallet,
    ConnectWalletCommand,
)
from monnayeur.application.use_cases.get_user_collection import (
    GetUserCollection,
    GetUserCollectionQuery,
)
from monnayeur.application.use_cases.register_chat_user import RegisterChatUser
from monnayeur.application.use_cases.start_mint_flow import (
    StartMintFlow,
    StartMintFlowCommand,
    build_webapp_url,
)

__all__ = [
    "ConfirmMint",
    "ConfirmMintCommand",
    "ConnectWallet",
    "ConnectWalletCommand",
    "GetUserCollection",
    "GetUserCollectionQuery",
    "RegisterChatUser",
    "StartMintFlow",
    "StartMintFlowCommand",
    "build_webapp_url",
]
