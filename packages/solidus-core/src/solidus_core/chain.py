"""On-chain code retrieval over JSON-RPC.

Fetches deployed bytecode with ``eth_getCode`` so recompiled bytecode can
be compared with what is actually on chain.
"""

from __future__ import annotations

import re

import httpx
import structlog

from solidus_core.errors import ChainRequestError

logger = structlog.get_logger(__name__)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def fetch_deployed_bytecode(
    rpc_url: str,
    address: str,
    *,
    block: str = "latest",
    client: httpx.Client | None = None,
    timeout_seconds: float = 30.0,
) -> str:
    """Return the code stored at an address.

    Args:
        rpc_url: JSON-RPC endpoint of an Ethereum node.
        address: 20-byte ``0x`` hex address.
        block: Block tag or number.
        client: Optional HTTP client (tests inject a mock transport).
        timeout_seconds: Request timeout when no client is given.

    Returns:
        ``0x``-prefixed hex code; ``"0x"`` for accounts without code.

    Raises:
        ValueError: If the address is malformed.
        ChainRequestError: If the request fails or the node returns an error.
    """
    if not ADDRESS_PATTERN.match(address):
        msg = f"Invalid address: {address}"
        raise ValueError(msg)

    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "eth_getCode",
        "params": [address, block],
    }
    log = logger.bind(loc="[GET_CODE]", address=address)

    try:
        if client is not None:
            response = client.post(rpc_url, json=payload)
        else:
            response = httpx.post(rpc_url, json=payload, timeout=timeout_seconds)
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        log.error("get_code_failed", error=str(exc))
        raise ChainRequestError("Could not fetch deployed bytecode") from exc

    if not isinstance(body, dict):
        raise ChainRequestError("Node returned an unexpected response")

    if "error" in body:
        log.error("get_code_failed", rpc_error=body["error"])
        raise ChainRequestError("Node rejected the eth_getCode request")

    code = body.get("result")
    if not isinstance(code, str):
        raise ChainRequestError("Node returned no bytecode")

    log.debug("get_code_completed", size=len(code))
    return code
