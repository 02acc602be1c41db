"""HTTP client for the storefront REST API."""
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request failed in transport or came back with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None, suggest_cod: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.suggest_cod = suggest_cod

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail") if isinstance(body, dict) else None
        suggest_cod = False
        if isinstance(detail, dict):
            suggest_cod = bool(detail.get("suggestCOD"))
            message = detail.get("message") or response.reason_phrase
        elif isinstance(detail, list) and detail:
            # FastAPI validation errors
            message = detail[0].get("msg", response.reason_phrase)
        else:
            message = detail or response.reason_phrase
        return cls(str(message), status_code=response.status_code, suggest_cod=suggest_cod)


class StorefrontClient:
    def __init__(self, http: httpx.Client):
        self.http = http

    @classmethod
    def connect(cls, base_url: str, email: str, password: str, timeout: float = 15.0) -> "StorefrontClient":
        return cls(httpx.Client(base_url=base_url, auth=(email, password), timeout=timeout))

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(f"Request failed: {e}") from e
        if response.is_error:
            raise ApiError.from_response(response)
        return response.json()

    def get_settings(self) -> dict:
        return self._request("GET", "/api/settings")

    def get_product(self, product_id: int) -> dict:
        return self._request("GET", f"/api/products/{product_id}")

    def create_order(self, payload: dict) -> dict:
        return self._request("POST", "/api/orders/", json=payload)

    def get_order(self, order_id: int) -> dict:
        return self._request("GET", f"/api/orders/{order_id}")

    def verify_payment(self, order_id: int, gateway_order_id: str, payment_id: str, signature: str) -> dict:
        return self._request("POST", "/api/payments/verify", json={
            "orderId": order_id,
            "gatewayOrderId": gateway_order_id,
            "paymentId": payment_id,
            "signature": signature,
        })

    def can_review(self, order_id: int, product_id: Optional[int] = None) -> dict:
        params = {"orderId": order_id}
        if product_id is not None:
            params["productId"] = product_id
        return self._request("GET", "/api/reviews/can-review", params=params)

    def create_review(self, order_id: int, rating: int, title: str, comment: str, product_id: Optional[int] = None) -> dict:
        return self._request("POST", "/api/reviews/", json={
            "orderId": order_id,
            "productId": product_id,
            "rating": rating,
            "title": title,
            "comment": comment,
        })
