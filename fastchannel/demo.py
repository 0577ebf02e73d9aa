"""Demo driver: read one product's stock, set it, then update many in a row.

Usage: python -m fastchannel.demo [iterations]
"""
from __future__ import annotations

import logging
import sys
import time
from typing import Callable, Optional, Sequence

from common.logging import configure_logging

from .client import FastchannelError, FastchannelHTTPClient
from .config import DEFAULT_DEMO_DELAY, DEFAULT_DEMO_ITERATIONS, Settings
from .stock import StockClient, stock_path, stock_resource_code

_log = logging.getLogger(__name__)

DEMO_STORAGE_ID = 18


def _call(label: str, fn: Callable[[], str]) -> Optional[str]:
    try:
        return fn()
    except FastchannelError as exc:
        _log.warning("%s failed: %s", label, exc)
        return None


def run_demo(
    http: FastchannelHTTPClient,
    iterations: int = DEFAULT_DEMO_ITERATIONS,
    delay: float = DEFAULT_DEMO_DELAY,
    storage_id: int = DEMO_STORAGE_ID,
    quantity: int = 999,
    *,
    sleep: Callable[[float], None] = time.sleep,
    out: Callable[[str], None] = print,
) -> int:
    """Run the demo calls against an authenticated client.

    Failed calls print ``None`` and the loop carries on. Returns the number
    of calls that succeeded.
    """
    stock = StockClient(http)
    ok = 0

    # Simple API call: HTTP/GET
    code = stock_resource_code(0)
    path = stock_path(code)
    body = _call(f"GET {path}", lambda: stock.get_product_stock(code))
    ok += body is not None
    out(f"[GET] HTTP Response for {path}:")
    out(str(body))
    out("")

    # Simple API call: HTTP/PUT
    body = _call(f"PUT {path}", lambda: stock.set_product_stock(code, storage_id, 0))
    ok += body is not None
    out(f"[PUT] HTTP Response for {path}:")
    out(str(body))
    out("")

    # Multiple API calls: sequential HTTP/PUT requests
    for i in range(iterations):
        code_i = stock_resource_code(i)
        path_i = stock_path(code_i)
        body = _call(
            f"PUT {path_i}",
            lambda: stock.set_product_stock(code_i, storage_id, quantity),
        )
        ok += body is not None
        out(f"[PUT] HTTP Response nº {i} for {path_i}:")
        out(str(body))
        out("")
        sleep(delay)

    _log.info("Demo finished: %d of %d calls succeeded", ok, iterations + 2)
    return ok


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    configure_logging(service_name="fastchannel-demo")

    if len(argv) > 1:
        print("Usage: python -m fastchannel.demo [iterations]")
        return 2

    try:
        settings = Settings.load()
        iterations = int(argv[0]) if argv else settings.demo_iterations
    except ValueError as exc:
        _log.error("Invalid configuration: %s", exc)
        return 2

    with FastchannelHTTPClient.from_settings(settings) as http:
        # Authenticate only once, then reuse the same token on every call.
        try:
            http.authenticate(
                settings.token_url,
                settings.client_id,
                settings.client_secret,
                settings.scope,
            )
        except FastchannelError:
            _log.exception("Authentication failed")
            return 1
        run_demo(http, iterations=iterations, delay=settings.demo_delay)
    return 0


if __name__ == "__main__":
    sys.exit(main())
