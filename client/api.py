"""REST client for the inventory API"""

import json
from typing import Any, Dict, List, Optional, Tuple

import requests

from core.envelope import (
    CONFLICT,
    INVALID_TOKEN,
    Envelope,
)
from core.logger import logger as _root_logger
from auth.schemas import UserSummary
from products.schemas import ProductResponse, ProductWrite
from users.schemas import UserRow
from client.errors import (
    ApiTimeoutError,
    ConflictError,
    ConnectionFailedError,
    ForbiddenError,
    InventoryClientError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)
from client.session import SessionStore

logger = _root_logger.getChild("client")

DEFAULT_TIMEOUT = 15.0

_TIMEOUT_MESSAGE = "Request timed out. Please check your internet connection."
_CONNECT_MESSAGE = "Cannot connect to server."


def normalize_product(raw: Dict[str, Any]) -> ProductResponse:
    """
    Coerce one product from the wire into a ``ProductResponse``.

    Tolerates the loose shapes older servers sent: missing name/price/stock,
    numbers as strings, and ``storeAvailability`` as a JSON-encoded string.
    """
    try:
        data = dict(raw)
        data["name"] = data.get("name") or "Unnamed Product"
        data["price"] = float(data.get("price") or 0)
        data["stock"] = int(data.get("stock") or 0)
        availability = data.get("storeAvailability", data.get("store_availability"))
        if isinstance(availability, str):
            availability = json.loads(availability or "[]")
        data["storeAvailability"] = availability or []
        data.pop("store_availability", None)
        return ProductResponse.model_validate(data)
    except (TypeError, ValueError) as exc:
        raise ServerError("Invalid data format received") from exc


class ApiClient:
    """
    Thin wrapper over ``requests`` for every endpoint the app uses.

    One attempt per call: there is no retry, so a timeout or error surfaces
    immediately and re-trying is left to the user.  The bearer token is read
    from the injected :class:`SessionStore` on every request.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionStore,
        timeout: float = DEFAULT_TIMEOUT,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.http = http or requests.Session()

    # -- transport -----------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> requests.Response:
        """
        Send one request and return the raw response if it was a 2xx.

        Raises one of the ``client.errors`` types otherwise.
        """
        headers = {"Accept": "application/json"}
        if payload is not None:
            headers["Content-Type"] = "application/json"
        if auth and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("API request %s %s", method, path)

        try:
            response = self.http.request(
                method=method,
                url=url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        # ConnectTimeout is both a Timeout and a ConnectionError; report it as a timeout
        except requests.Timeout as exc:
            logger.warning("API request %s %s timed out after %.0fs", method, path, self.timeout)
            raise ApiTimeoutError(_TIMEOUT_MESSAGE) from exc
        except requests.ConnectionError as exc:
            logger.warning("API request %s %s failed to connect: %s", method, path, exc)
            raise ConnectionFailedError(_CONNECT_MESSAGE) from exc

        if not response.ok:
            raise self._error_for(response)
        return response

    def _call(self, method: str, path: str, payload=None, auth: bool = True) -> Any:
        """Send a request and return the ``data`` of its success envelope."""
        response = self._request(method, path, payload=payload, auth=auth)
        try:
            envelope = Envelope[Any].model_validate(response.json())
        except ValueError as exc:
            raise ServerError("Invalid response from server", status_code=response.status_code) from exc
        return envelope.data

    @staticmethod
    def _error_for(response: requests.Response) -> InventoryClientError:
        """Map a non-2xx response onto the client error taxonomy."""
        status = response.status_code
        code = None
        message = f"HTTP error {status}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("error")
            message = body.get("message") or body.get("detail") or message

        logger.info("API error status=%d code=%s message=%s", status, code, message)

        if status == 401 or (status == 403 and code == INVALID_TOKEN):
            return UnauthorizedError(message, status, code)
        if status == 403:
            return ForbiddenError(message, status, code)
        if status == 404:
            return NotFoundError(message, status, code)
        if status == 400 and code == CONFLICT:
            return ConflictError(message, status, code)
        if status in (400, 409, 422):
            return ValidationError(message, status, code)
        if status >= 500:
            return ServerError(message, status, code)
        return InventoryClientError(message, status, code)

    # -- connectivity --------------------------------------------------------

    def ping(self) -> bool:
        self._call("GET", "/ping", auth=False)
        return True

    # -- auth ----------------------------------------------------------------

    def register(self, username: str, password: str, email: Optional[str] = None) -> int:
        """Create an account and return its id."""
        data = self._call(
            "POST",
            "/auth/register",
            {"username": username, "password": password, "email": email},
            auth=False,
        )
        return int(data["userId"])

    def login(self, username: str, password: str) -> Tuple[str, UserSummary]:
        """Return ``(token, user)``.  Does not touch the session store."""
        data = self._call(
            "POST",
            "/auth/login",
            {"username": username, "password": password},
            auth=False,
        )
        if not data or not data.get("token") or not data.get("user"):
            raise ServerError("Invalid response from server")
        return data["token"], UserSummary.model_validate(data["user"])

    def verify(self) -> UserSummary:
        data = self._call("GET", "/auth/verify")
        return UserSummary.model_validate(data["user"])

    # -- products ------------------------------------------------------------

    def list_products(self) -> List[ProductResponse]:
        data = self._call("GET", "/products")
        if not isinstance(data, list):
            raise ServerError("Invalid data format received")
        return [normalize_product(p) for p in data]

    def get_product(self, product_id: int) -> ProductResponse:
        return normalize_product(self._call("GET", f"/products/{product_id}"))

    def create_product(self, product: ProductWrite) -> int:
        data = self._call("POST", "/products", product.model_dump(mode="json", by_alias=True))
        return int(data["id"])

    def update_product(self, product_id: int, product: ProductWrite) -> ProductResponse:
        data = self._call(
            "PUT",
            f"/products/{product_id}",
            product.model_dump(mode="json", by_alias=True),
        )
        return normalize_product(data)

    def delete_product(self, product_id: int) -> None:
        self._call("DELETE", f"/products/{product_id}")

    def export_products(self) -> bytes:
        """Download the catalog as .xlsx bytes (admin only)."""
        return self._request("GET", "/products/export").content

    # -- users ---------------------------------------------------------------

    def profile(self) -> UserRow:
        return UserRow.model_validate(self._call("GET", "/users/profile"))

    def list_users(self) -> List[UserRow]:
        return [UserRow.model_validate(u) for u in self._call("GET", "/users")]
