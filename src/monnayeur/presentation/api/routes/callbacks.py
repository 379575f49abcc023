"""
Browser front end callback routes.

- POST /wallet/connected - Wallet connected in the webapp
- POST /mint/confirm - Mint confirmed on chain
"""

from fastapi import APIRouter, Depends, Response, status

from monnayeur.application.dto.mint_dto import CallbackResult, CallbackStatus
from monnayeur.application.use_cases.confirm_mint import (
    ConfirmMint,
    ConfirmMintCommand,
)
from monnayeur.application.use_cases.connect_wallet import (
    ConnectWallet,
    ConnectWalletCommand,
)
from monnayeur.di.dependencies import get_confirm_mint, get_connect_wallet
from monnayeur.presentation.schemas.mint_schemas import (
    AssetResponse,
    CallbackResponse,
    MintConfirmRequest,
    UserResponse,
    WalletConnectedRequest,
)

router = APIRouter(tags=["Callbacks"])

CALLBACK_STATUS_CODES = {
    CallbackStatus.RECORDED: status.HTTP_200_OK,
    CallbackStatus.CONNECTED: status.HTTP_200_OK,
    CallbackStatus.DUPLICATE: status.HTTP_200_OK,
    CallbackStatus.UNKNOWN_USER: status.HTTP_404_NOT_FOUND,
    CallbackStatus.CONSTRAINT_VIOLATION: status.HTTP_409_CONFLICT,
    CallbackStatus.SESSION_EXPIRED: status.HTTP_410_GONE,
}


def _to_response(result: CallbackResult, response: Response) -> CallbackResponse:
    response.status_code = CALLBACK_STATUS_CODES[result.status]
    return CallbackResponse(
        success=result.status.is_success,
        status=result.status.value,
        message=result.message,
        user=UserResponse.from_entity(result.user) if result.user else None,
        asset=AssetResponse.from_entity(result.asset) if result.asset else None,
    )


@router.post(
    "/wallet/connected",
    response_model=CallbackResponse,
    summary="Wallet connected",
    description="Record the wallet a browser front end connected",
)
async def wallet_connected(
    request: WalletConnectedRequest,
    response: Response,
    use_case: ConnectWallet = Depends(get_connect_wallet),
) -> CallbackResponse:
    """Attach a connected wallet to the session owner or social user."""
    result = await use_case.execute(
        ConnectWalletCommand(
            wallet_address=request.wallet_address,
            session_id=request.session_id,
            social_id=request.social_id,
            display_name=request.display_name,
        )
    )
    return _to_response(result, response)


@router.post(
    "/mint/confirm",
    response_model=CallbackResponse,
    summary="Mint confirmed",
    description="Record a mint the browser front end saw confirmed on chain",
)
async def mint_confirm(
    request: MintConfirmRequest,
    response: Response,
    use_case: ConfirmMint = Depends(get_confirm_mint),
) -> CallbackResponse:
    """Record a confirmed mint against the resolved user."""
    result = await use_case.execute(
        ConfirmMintCommand(
            token_id=request.token_id,
            transaction_ref=request.transaction_ref,
            wallet_address=request.wallet_address,
            metadata_locator=request.metadata_locator,
            block_height=request.block_height,
            origin_platform=request.origin_platform,
            session_id=request.session_id,
            social_id=request.social_id,
            display_name=request.display_name,
        )
    )
    return _to_response(result, response)
