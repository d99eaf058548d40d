import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed call to the repository backend.

    `message` is the backend's own message string when it sent one, so it can
    be shown to the user verbatim.
    """

    def __init__(self, message, status=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


class Unauthorized(ApiError):
    pass


def _error_message(response):
    try:
        payload = response.json()
    except ValueError:
        return None, response.text or response.reason or f"HTTP {response.status_code}"

    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error") or payload.get("detail")
        if message:
            return payload, str(message)
    return payload, response.reason or f"HTTP {response.status_code}"


class ApiClient:
    def __init__(self, base_url=None, token=None, timeout=None, session=None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT
        self.session = session or requests.Session()

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def headers(self):
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method, path, json=None, params=None):
        url = self.url(path)
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=self.headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError("Unable to reach the server. Please try again.") from exc

        if response.status_code == 401:
            payload, message = _error_message(response)
            logger.info("%s %s rejected the session token", method, url)
            raise Unauthorized(message, status=401, payload=payload)

        if not response.ok:
            payload, message = _error_message(response)
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise ApiError(message, status=response.status_code, payload=payload)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("The server sent an unreadable response.", status=response.status_code) from exc

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, json=None):
        return self.request("POST", path, json=json)

    def patch(self, path, json=None):
        return self.request("PATCH", path, json=json)
