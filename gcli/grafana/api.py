"""Grafana HTTP API client."""

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from gcli.common.config import Profile

logger = logging.getLogger(__name__)

ORG_HEADER = "X-Grafana-Org-Id"


class GrafanaAPI:
    """Client for the Grafana REST API, bound to one profile and organization."""

    def __init__(self, profile: Profile, org_id: Optional[str] = None):
        self.profile = profile
        self.base_url = profile.url.rstrip('/')
        self.org_id = org_id or None

    def _headers(self, scoped: bool, with_body: bool) -> dict:
        headers = {}
        if with_body:
            headers["Content-Type"] = "application/json"
        if scoped and self.org_id:
            headers[ORG_HEADER] = str(self.org_id)
        return headers

    def raw(self, method: str, path: str, data: Any = None, scoped: bool = True) -> requests.Response:
        """Send a request and return the response without status checks."""
        if not path.startswith('/'):
            path = '/' + path
        url = f"{self.base_url}{path}"
        logger.debug(f"{method.upper()} {url}")

        return requests.request(
            method.upper(),
            url,
            auth=(self.profile.user, self.profile.password),
            headers=self._headers(scoped, data is not None),
            data=json.dumps(data) if data is not None else None,
        )

    def request(self, method: str, path: str, data: Any = None, scoped: bool = True) -> Any:
        """
        Make an authenticated request to the Grafana API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path, e.g. /api/datasources
            data: JSON-serializable body (for POST/PUT)
            scoped: Send the organization header when an org is selected

        Returns:
            Parsed JSON response (None for an empty body)

        Raises:
            requests.HTTPError: On a non-2xx status, with status and body in the message
            ValueError: If a successful response body is not JSON
        """
        response = self.raw(method, path, data=data, scoped=scoped)

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            detail = f"{response.status_code} {response.reason}: {response.text.strip()}"
            raise requests.HTTPError(detail, response=response) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ValueError(f"invalid JSON from {method.upper()} {path}: {e}") from e

    # -------------------------------------------------------------------------
    # Dashboards
    # -------------------------------------------------------------------------

    def search_dashboards(self) -> List[dict]:
        return self.request("GET", "/api/search?type=dash-db") or []

    def get_dashboard(self, uid: str) -> Dict[str, Any]:
        """Fetch {dashboard, meta} for a dashboard UID."""
        return self.request("GET", f"/api/dashboards/uid/{uid}")

    def save_dashboard(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create or overwrite a dashboard ({dashboard, overwrite, folderUid?})."""
        return self.request("POST", "/api/dashboards/db", data=payload)

    def delete_dashboard(self, uid: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/dashboards/uid/{uid}")

    # -------------------------------------------------------------------------
    # Data sources
    # -------------------------------------------------------------------------

    def list_datasources(self) -> List[dict]:
        return self.request("GET", "/api/datasources") or []

    def get_datasource(self, datasource_id: int) -> Dict[str, Any]:
        return self.request("GET", f"/api/datasources/{datasource_id}")

    def create_datasource(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/api/datasources", data=body)

    def update_datasource(self, datasource_id: int, body: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/api/datasources/{datasource_id}", data=body)

    def delete_datasource(self, datasource_id: int) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/datasources/{datasource_id}")

    # -------------------------------------------------------------------------
    # Organizations (server-wide, never org-scoped)
    # -------------------------------------------------------------------------

    def list_orgs(self) -> List[dict]:
        return self.request("GET", "/api/orgs", scoped=False) or []

    def create_org(self, name: str) -> Dict[str, Any]:
        return self.request("POST", "/api/orgs", data={"name": name}, scoped=False)

    def update_org(self, org_id: int, name: str) -> Dict[str, Any]:
        return self.request("PUT", f"/api/orgs/{org_id}", data={"name": name}, scoped=False)

    def delete_org(self, org_id: int) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/orgs/{org_id}", scoped=False)
