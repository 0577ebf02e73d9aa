"""Stock-management (Stock v1) helpers over :class:`FastchannelHTTPClient`.

Operations documented at
https://developers.commerce.fastchannel.com/api-details#api=Stock-v1
"""
from __future__ import annotations

import json
import math
from typing import Final, Tuple

from .client import FastchannelHTTPClient

__all__ = [
    "STOCK_RESOURCE_ROOT",
    "PRODUCT_CODES",
    "FALLBACK_PRODUCT_CODE",
    "StockClient",
    "stock_body",
    "stock_path",
    "stock_resource_code",
]

STOCK_RESOURCE_ROOT: Final[str] = "stock-management/v1/stock/"

# Demo catalogue, cycled through by index.
PRODUCT_CODES: Final[Tuple[str, ...]] = (
    "32004210",
    "31232810",
    "32004222",
    "32003810",
    "31236920",
    "31239920",
    "33140121",
    "31012651",
    "32004022",
    "33008910",
)
FALLBACK_PRODUCT_CODE: Final[str] = "00000000"


def stock_resource_code(index: int) -> str:
    """Product code for the *index*-th demo call; wraps every ten.

    The remainder truncates toward zero, so -10 maps to the first code while
    other negative indexes get the fallback.
    """
    r = int(math.fmod(index, len(PRODUCT_CODES)))
    if r < 0:
        return FALLBACK_PRODUCT_CODE
    return PRODUCT_CODES[r]


def stock_path(product_code: str) -> str:
    return f"{STOCK_RESOURCE_ROOT}{product_code}"


def stock_body(storage_id: int, quantity: int) -> str:
    return json.dumps({"StorageId": storage_id, "Quantity": quantity}, separators=(",", ":"))


class StockClient:
    def __init__(self, http: FastchannelHTTPClient) -> None:
        self.http = http

    def get_product_stock(self, product_code: str) -> str:
        """GET stock-management/v1/stock/{code} (getproductstock)."""
        return self.http.get(stock_path(product_code))

    def set_product_stock(self, product_code: str, storage_id: int, quantity: int) -> str:
        """PUT stock-management/v1/stock/{code} (setproductstock)."""
        return self.http.put(stock_path(product_code), stock_body(storage_id, quantity))
