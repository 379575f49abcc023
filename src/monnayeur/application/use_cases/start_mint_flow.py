"""
Start mint flow use case.

Called by the chat command handler for /mint: registers the user, checks
eligibility and hands out a webapp session.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from monnayeur.application.dto.mint_dto import MintFlowResult
from monnayeur.domain.repositories.i_identity_store import IIdentityStore
from monnayeur.domain.repositories.i_session_store import ISessionStore
from monnayeur.domain.services.eligibility_policy import MintEligibilityPolicy
from monnayeur.infrastructure.monitoring import metrics
from monnayeur.infrastructure.monitoring.logger import get_logger
from monnayeur.utils.clock import Clock, utc_now

logger = get_logger(__name__)


@dataclass
class StartMintFlowCommand:
    """Command to start a browser mint flow."""

    chat_id: int
    display_name: Optional[str] = None


def build_webapp_url(webapp_url: str, token: str, chat_id: int) -> str:
    """Link opened by the chat client's mint button."""
    query = urlencode({"session": token, "telegramId": chat_id})
    return f"{webapp_url}?{query}"


class StartMintFlow:
    """
    Use case for starting a mint from the chat client.

    Business rules:
    - The user row is created or refreshed before the check
    - A refused user gets no session
    """

    def __init__(
        self,
        identity_store: IIdentityStore,
        session_store: ISessionStore,
        policy: MintEligibilityPolicy,
        webapp_url: str,
        session_ttl_seconds: int = 3600,
        now_fn: Clock = utc_now,
    ):
        """
        Initialize use case.

        Args:
            identity_store: Identity store
            session_store: Session store
            policy: Mint eligibility policy
            webapp_url: Base URL of the browser minting front end
            session_ttl_seconds: Lifetime of the created session
            now_fn: Clock used for the eligibility check
        """
        self.identity_store = identity_store
        self.session_store = session_store
        self.policy = policy
        self.webapp_url = webapp_url
        self.session_ttl_seconds = session_ttl_seconds
        self.now_fn = now_fn

    async def execute(self, command: StartMintFlowCommand) -> MintFlowResult:
        """
        Start a mint flow.

        Args:
            command: Command with chat id and display name

        Returns:
            MintFlowResult with the decision and, if allowed, the session
        """
        internal_id = await self.identity_store.upsert_by_chat_id(
            command.chat_id, command.display_name
        )
        user = await self.identity_store.resolve_by_internal_id(internal_id)

        decision = self.policy.evaluate(user, self.now_fn())

        if not decision.allowed:
            metrics.eligibility_denials_total.labels(
                reason=decision.reason.value
            ).inc()
            logger.info(
                f"Mint refused for chat user {command.chat_id}: "
                f"{decision.reason.value}",
                extra={"operation": "start_mint_flow", "user_id": internal_id},
            )
            return MintFlowResult(decision=decision, user=user)

        session = await self.session_store.create(
            command.chat_id, self.session_ttl_seconds
        )
        metrics.sessions_created_total.inc()

        logger.info(
            f"Mint flow started for chat user {command.chat_id}",
            extra={"operation": "start_mint_flow", "user_id": internal_id},
        )

        return MintFlowResult(
            decision=decision,
            user=user,
            session=session,
            webapp_url=build_webapp_url(
                self.webapp_url, session.token, command.chat_id
            ),
        )
