import logging
import time
from typing import Any, Dict, List, Optional

import requests
import urllib3
from requests.exceptions import ConnectionError, ReadTimeout

from .models import Page

logger = logging.getLogger(__name__)

SSL_CHECK_TIMEOUT = 10


class NetBoxError(RuntimeError):
    """Base error for failed Netbox API calls."""


class NetBoxAPIError(NetBoxError):
    """Netbox answered with an unexpected HTTP status."""

    def __init__(self, status_code: int, detail: str, url: str):
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(f"HTTP {status_code} from {url}: {detail}")


class NotFoundError(NetBoxAPIError):
    """HTTP 404: no such object on the Netbox server."""


class ConflictError(NetBoxAPIError):
    """HTTP 409: the object is still referenced by other objects."""


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or resp.reason or "").strip()[:200]
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)[:200]


class NetBoxClient:
    """Thin wrapper around the Netbox REST API (read and write operations)."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = 30,
        verify_ssl: bool = True,
        auth_scheme: str = "Token",
        max_retries: int = 3,
    ):
        self.base_url = base_url.rstrip('/')
        self.verify_ssl = verify_ssl
        self.default_timeout = timeout
        self.max_retries = max_retries
        self.session = requests.Session()
        self.session.headers.update(
            {
                'Authorization': f'{auth_scheme} {token}',
                'Content-Type': 'application/json',
                'Accept': 'application/json',
            }
        )
        self.logger = logging.getLogger(__name__)

        if not verify_ssl:
            # self-signed lab instances
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def url_for(self, endpoint: str) -> str:
        """Absolute URL for an API path; absolute URLs (e.g. `next` cursors) pass through."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}{endpoint}"

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[dict] = None,
        payload: Any = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        url = self.url_for(endpoint)
        self.logger.debug("%s %s params=%s", method, url, params)
        kwargs: Dict[str, Any] = {
            "params": params,
            "verify": self.verify_ssl,
            "timeout": timeout or self.default_timeout,
        }
        if payload is not None:
            kwargs["json"] = payload
        resp = self.session.request(method, url, **kwargs)
        self._raise_for_status(resp, url)
        return resp

    @staticmethod
    def _raise_for_status(resp: requests.Response, url: str) -> None:
        if resp.status_code == 404:
            raise NotFoundError(resp.status_code, _error_detail(resp), url)
        if resp.status_code == 409:
            raise ConflictError(resp.status_code, _error_detail(resp), url)
        if not 200 <= resp.status_code < 300:
            raise NetBoxAPIError(resp.status_code, _error_detail(resp), url)

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise NetBoxError(f"Netbox returned a non-JSON body for {resp.url}") from exc

    def _get(
        self,
        endpoint: str,
        params: dict = None,
        timeout: Optional[int] = None,
    ) -> Any:
        """Make a GET request to Netbox API with retry logic."""
        for attempt in range(self.max_retries):
            try:
                effective_timeout = (timeout or self.default_timeout) + (attempt * 30)
                resp = self._request("GET", endpoint, params=params, timeout=effective_timeout)
                return self._json(resp)

            except ReadTimeout:
                if attempt < self.max_retries - 1:
                    wait_time = 2 ** attempt
                    self.logger.warning(
                        f"Timeout (attempt {attempt + 1}/{self.max_retries}), "
                        f"retrying in {wait_time}s... URL: {endpoint}"
                    )
                    time.sleep(wait_time)
                else:
                    self.logger.error(f"Failed after {self.max_retries} attempts for {endpoint}")
                    raise
            except ConnectionError:
                if attempt < self.max_retries - 1:
                    wait_time = 2 ** attempt
                    self.logger.warning(
                        f"Connection error (attempt {attempt + 1}/{self.max_retries}), "
                        f"retrying in {wait_time}s..."
                    )
                    time.sleep(wait_time)
                else:
                    raise

    def get_page(self, endpoint: str, params: Optional[dict] = None) -> Page:
        """Fetch one page of a list endpoint. `endpoint` may be the previous page's `next` URL."""
        return Page.from_dict(self._get(endpoint, params=params))

    def get_object(self, endpoint: str, object_id: int) -> dict:
        """Get a single object by ID."""
        if not isinstance(object_id, int):
            raise RuntimeError("object_id must be an integer")
        return self._get(f"{endpoint}{object_id}/")

    def query(self, endpoint: str, q: str, params: Optional[dict] = None) -> Page:
        """Free-text search (`?q=`) on a list endpoint."""
        return self.get_page(endpoint, params={**(params or {}), "q": q})

    def get_by_serial(self, serial: str) -> Page:
        return self.get_page("/api/dcim/devices/", params={"serial": serial})

    def get_connected_device(self, peer_device: str, peer_interface: str) -> List[dict]:
        """Look up the device on the far side of a device's interface."""
        data = self._get(
            "/api/dcim/connected-device/",
            params={"peer_device": peer_device, "peer_interface": peer_interface},
        )
        # Netbox < 4 returns a single object, later versions a list.
        if isinstance(data, dict):
            return [data]
        return [d for d in data or [] if isinstance(d, dict)]

    def patch(self, endpoint: str, payload: Any, *, timeout: Optional[int] = None) -> Any:
        """PATCH to Netbox API and return JSON response."""
        resp = self._request("PATCH", endpoint, payload=payload, timeout=timeout)
        return self._json(resp)

    def patch_object(self, endpoint: str, object_id: int, payload: dict) -> dict:
        return self.patch(f"{endpoint}{object_id}/", payload)

    def post(self, endpoint: str, payload: Any, *, timeout: Optional[int] = None) -> Any:
        resp = self._request("POST", endpoint, payload=payload, timeout=timeout)
        return self._json(resp)

    def delete(self, endpoint: str, payload: Any, *, timeout: Optional[int] = None) -> None:
        """Bulk delete; payload is a list of {"id": ...} objects."""
        self._request("DELETE", endpoint, payload=payload, timeout=timeout)

    def delete_object(self, endpoint: str, object_id: int) -> None:
        self._request("DELETE", f"{endpoint}{object_id}/")

    def check_ssl(self) -> Optional[str]:
        """
        Validate the server certificate of the Netbox root URL.

        Returns None when the certificate is valid and the server answers 200,
        otherwise a short error description. Never raises.
        """
        try:
            resp = self.session.request(
                "GET",
                self.base_url,
                verify=True,
                timeout=SSL_CHECK_TIMEOUT,
            )
        except requests.exceptions.RequestException as exc:
            return str(exc)
        if resp.status_code != 200:
            return f"bad status: {resp.status_code} {resp.reason}"
        return None
