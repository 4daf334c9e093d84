"""Defines common Value Objects used across the request layer.

These objects represent simple values like request targets, HTTP methods
and the options accepted by the executor.
"""

from typing import Any, Dict, Mapping, NewType, Optional, TypedDict, Union

# === Core Value Objects ===

RequestTarget = NewType("RequestTarget", str)   # Absolute URL or path relative to the API base URL
HttpMethod = NewType("HttpMethod", str)         # 'GET', 'POST', 'PUT', 'DELETE', ...
BearerToken = NewType("BearerToken", str)       # Credential sent in the Authorization header
EndpointName = NewType("EndpointName", str)     # Key into the backend endpoint registry

JSON_CONTENT_TYPE = "application/json"
RETRYABLE_STATUS_CODES = (500, 502, 503, 504)

# --- Structured Data ---

class RequestOptions(TypedDict, total=False):
    """Per-call options for an outbound request (all optional)."""
    method: str
    headers: Mapping[str, str]
    body: Union[str, bytes, None]
    params: Optional[Dict[str, Any]]
