"""Registry of back-office API endpoints.

Paths are relative to the API base URL (see settings.get_api_base_url).
"""

from typing import Dict, Optional

from tubeflow.domain.models.common import EndpointName

API_ENDPOINTS: Dict[EndpointName, str] = {
    EndpointName(name): f"/api/{name}"
    for name in (
        "leads",
        "quotations",
        "pos",
        "do1",
        "do2",
        "inventory",
        "invoice",
        "invoices",
        "sms",
        "tally",
        "reports",
        "health",
    )
}


def get_api_url(endpoint: str, base_url: Optional[str] = None) -> str:
    """Joins an endpoint path onto the base URL without doubled slashes.

    A registered endpoint name ('leads') is expanded to its path first.

    Args:
        endpoint: Endpoint name or path, with or without a leading slash.
        base_url: Base URL; when None, only the normalized path is returned.
    """
    path = API_ENDPOINTS.get(EndpointName(endpoint), endpoint)
    clean_path = path[1:] if path.startswith('/') else path
    if base_url is None:
        return f"/{clean_path}"
    return f"{base_url.rstrip('/')}/{clean_path}"
