"""JSON-RPC 2.0 envelope helpers shared by the upstream adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from dealtrack.config.http_resilience import RetryablePayloadError

if TYPE_CHECKING:
    import httpx

JSONRPC_VERSION = "2.0"
JSON_HEADERS = {"content-type": "application/json"}


class RpcBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RpcErrorPayload(RpcBaseModel):
    code: int
    message: str = ""


def rpc_request(method: str, params: list[object], *, request_id: int = 1) -> dict[str, object]:
    return {
        "id": request_id,
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "params": params,
    }


def decode_json(response: httpx.Response) -> object:
    """Decode a 2xx response body; an unparsable body is retried like a transport error."""

    response.raise_for_status()
    try:
        return response.json()
    except ValueError as exc:
        raise RetryablePayloadError(
            f"Invalid JSON payload from {response.request.url}", response=response
        ) from exc
