import pytest

from common import secrets as secrets_module


def pytest_configure(config):
    """If pytest-socket is installed, disable sockets so no test reaches the API."""
    try:
        import pytest_socket

        pytest_socket.disable_socket()
    except ImportError:
        pass


# ---------------------------------------------------------------------------
# Default credentials for client tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _secrets(monkeypatch) -> None:
    """Provide default secrets via the secrets manager; hide real env values."""

    for key in (
        "FASTCHANNEL_CLIENT_ID",
        "FASTCHANNEL_CLIENT_SECRET",
        "FASTCHANNEL_SUBSCRIPTION_KEY",
        "FASTCHANNEL_CLIENT_SCOPE",
        "FASTCHANNEL_TOKEN_URL",
        "FASTCHANNEL_BASE_URL",
        "FASTCHANNEL_TIMEOUT",
        "FASTCHANNEL_DEMO_DELAY",
        "FASTCHANNEL_DEMO_ITERATIONS",
    ):
        monkeypatch.delenv(key, raising=False)

    secrets_module.secrets.set_override(
        {
            "FASTCHANNEL_CLIENT_ID": "cid",
            "FASTCHANNEL_CLIENT_SECRET": "csecret",
            "FASTCHANNEL_SUBSCRIPTION_KEY": "subkey",
        }
    )
    yield
    secrets_module.secrets.set_override({})
