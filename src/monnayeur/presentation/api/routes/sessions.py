"""
Session API routes.

- POST /sessions - Start a browser mint flow for a chat user
"""

from fastapi import APIRouter, Depends, Response, status

from monnayeur.application.use_cases.start_mint_flow import (
    StartMintFlow,
    StartMintFlowCommand,
)
from monnayeur.di.dependencies import get_start_mint_flow
from monnayeur.domain.services.eligibility_policy import DenialReason
from monnayeur.presentation.schemas.mint_schemas import (
    CreateSessionRequest,
    MintFlowResponse,
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])

DENIAL_STATUS_CODES = {
    DenialReason.LIFETIME_CAP_REACHED: status.HTTP_403_FORBIDDEN,
    DenialReason.COOLDOWN: status.HTTP_429_TOO_MANY_REQUESTS,
}


@router.post(
    "",
    response_model=MintFlowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start mint flow",
    description="Check eligibility and create a webapp session for a chat user",
)
async def create_session(
    request: CreateSessionRequest,
    response: Response,
    use_case: StartMintFlow = Depends(get_start_mint_flow),
) -> MintFlowResponse:
    """
    Start a mint flow.

    Returns:
        Session and webapp URL, or the refusal reason

    Status codes:
        201 session created, 403 lifetime cap reached, 429 cooldown
    """
    result = await use_case.execute(
        StartMintFlowCommand(
            chat_id=request.chat_id,
            display_name=request.display_name,
        )
    )

    if not result.allowed:
        response.status_code = DENIAL_STATUS_CODES[result.decision.reason]
        return MintFlowResponse(
            allowed=False,
            reason=result.decision.reason.value,
            remaining_seconds=result.decision.remaining_seconds,
        )

    return MintFlowResponse(
        allowed=True,
        session_id=result.session.token,
        webapp_url=result.webapp_url,
        expires_at=result.session.expires_at,
    )
