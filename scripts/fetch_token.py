"""Utility script to fetch an OAuth2 access token for the Fastchannel API."""

import os

from common.secrets import get_secret
from fastchannel.client import fetch_token
from fastchannel.config import DEFAULT_SCOPE, DEFAULT_TOKEN_URL

if __name__ == "__main__":
    client_id = get_secret("FASTCHANNEL_CLIENT_ID")
    client_secret = get_secret("FASTCHANNEL_CLIENT_SECRET")
    if not client_id or not client_secret:
        raise SystemExit("Set FASTCHANNEL_CLIENT_ID and FASTCHANNEL_CLIENT_SECRET in secrets")
    token = fetch_token(
        client_id,
        client_secret,
        scope=get_secret("FASTCHANNEL_CLIENT_SCOPE", DEFAULT_SCOPE),
        token_url=os.getenv("FASTCHANNEL_TOKEN_URL", DEFAULT_TOKEN_URL),
    )
    print(token)
