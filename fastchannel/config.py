"""Defaults and settings for the Fastchannel commerce client."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from common.secrets import get_secret, require_secret

DEFAULT_TOKEN_URL: Final[str] = (
    "https://login.microsoftonline.com/fastchannel.com/oauth2/v2.0/token"
)
DEFAULT_BASE_URL: Final[str] = "https://api.commerce.fastchannel.com/"
# Placeholder; the real scope names the tenant's application id.
DEFAULT_SCOPE: Final[str] = "api://xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx/.default"
DEFAULT_TIMEOUT: Final[float] = 30.0
DEFAULT_DEMO_DELAY: Final[float] = 0.5
DEFAULT_DEMO_ITERATIONS: Final[int] = 100


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    subscription_key: str
    scope: str = DEFAULT_SCOPE
    token_url: str = DEFAULT_TOKEN_URL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    demo_delay: float = DEFAULT_DEMO_DELAY
    demo_iterations: int = DEFAULT_DEMO_ITERATIONS

    @classmethod
    def load(cls) -> "Settings":
        """Build settings from the secrets manager and environment.

        Credentials and the subscription key come from secrets (falling back
        to same-named env vars); endpoints and timings from env only.
        Raises ``ValueError`` when a credential is missing or a number is
        malformed.
        """
        return cls(
            client_id=require_secret("FASTCHANNEL_CLIENT_ID"),
            client_secret=require_secret("FASTCHANNEL_CLIENT_SECRET"),
            subscription_key=require_secret("FASTCHANNEL_SUBSCRIPTION_KEY"),
            scope=get_secret("FASTCHANNEL_CLIENT_SCOPE", DEFAULT_SCOPE).strip(),
            token_url=os.getenv("FASTCHANNEL_TOKEN_URL", DEFAULT_TOKEN_URL),
            base_url=os.getenv("FASTCHANNEL_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("FASTCHANNEL_TIMEOUT", DEFAULT_TIMEOUT)),
            demo_delay=float(os.getenv("FASTCHANNEL_DEMO_DELAY", DEFAULT_DEMO_DELAY)),
            demo_iterations=int(
                os.getenv("FASTCHANNEL_DEMO_ITERATIONS", DEFAULT_DEMO_ITERATIONS)
            ),
        )

    def __repr__(self) -> str:
        return (
            f"Settings(client_id={self.client_id!r}, base_url={self.base_url!r}, "
            f"token_url={self.token_url!r}, scope={self.scope!r})"
        )
