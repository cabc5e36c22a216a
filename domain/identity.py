"""Accounts live with Firebase Authentication, reached over its REST api.

Only the identity (uid, email, id token) ever comes back; passwords are sent
through and not kept.
"""

import logging
from typing import Any, Callable, TypeAlias

import httpx

from domain.errors import IdentityError
from domain.models import Identity


logger = logging.getLogger(__name__)


BASE_URL = "https://identitytoolkit.googleapis.com/v1/"
TIMEOUT = 20


EMAIL_EXISTS = "EMAIL_EXISTS"
WEAK_PASSWORD = "WEAK_PASSWORD"
INVALID_CREDENTIALS = (
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
)


ACCOUNT_EXISTS_MSG = "A user with this email address already exists."
CREATE_FAILED_MSG = "An unexpected error occurred while creating the user."
BAD_CREDENTIALS_MSG = "Invalid email or password. Please try again."
SIGN_IN_FAILED_MSG = "There was a problem with signing you in."


SessionListener: TypeAlias = Callable[[Identity | None], None]


def identity_client_factory() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"Content-Type": "application/json"},
        timeout=TIMEOUT,
    )


def error_message(data: dict[str, Any]) -> str:
    """Provider message, e.g. 'WEAK_PASSWORD : Password should be at least 6 characters'."""
    error = data.get("error") or {}
    return str(error.get("message", "")) if isinstance(error, dict) else ""


def error_code(message: str) -> str:
    return message.split(" : ", 1)[0].strip()


def create_account_error(message: str) -> IdentityError:
    code = error_code(message)
    if code == EMAIL_EXISTS:
        return IdentityError(ACCOUNT_EXISTS_MSG, code=code)
    if code == WEAK_PASSWORD:
        return IdentityError(message, code=code)
    return IdentityError(CREATE_FAILED_MSG, code=code or None)


def sign_in_error(message: str) -> IdentityError:
    code = error_code(message)
    if code in INVALID_CREDENTIALS:
        return IdentityError(BAD_CREDENTIALS_MSG, code=code)
    return IdentityError(SIGN_IN_FAILED_MSG, code=code or None)


class IdentityProvider:
    def __init__(
        self,
        *,
        api_key: str = "",
        base_url: str = BASE_URL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._http_client = http_client
        self._listeners: list[SessionListener] = []

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = identity_client_factory()
        return self._http_client

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call `listener` on every sign in and sign out. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            listener(identity)

    async def _post(
        self,
        endpoint: str,
        payload: dict[str, Any],
        on_error: Callable[[str], IdentityError],
    ) -> Identity:
        try:
            resp = await self.http_client.post(
                self.base_url + endpoint, params={"key": self.api_key}, json=payload
            )
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Identity provider call %s failed: %r", endpoint, e)
            raise on_error("") from e

        if not isinstance(data, dict):
            logger.error("Identity provider sent an unexpected %s body", endpoint)
            raise on_error("")

        if resp.is_error or "error" in data:
            err = on_error(error_message(data))
            logger.warning("Identity provider rejected %s: %s", endpoint, err.code)
            raise err

        return Identity(
            uid=data.get("localId", ""),
            email=data.get("email", payload["email"]),
            id_token=data.get("idToken", ""),
        )

    async def create_account(self, email: str, password: str) -> Identity:
        payload = {"email": email, "password": password, "returnSecureToken": True}
        identity = await self._post("accounts:signUp", payload, create_account_error)
        logger.info("Created account %s", identity.uid)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        payload = {"email": email, "password": password, "returnSecureToken": True}
        identity = await self._post(
            "accounts:signInWithPassword", payload, sign_in_error
        )
        self._notify(identity)
        return identity

    def sign_out(self, identity: Identity | None) -> None:
        # Tokens are short lived and held only in the session cookie.
        if identity is not None:
            logger.info("Signed out %s", identity.uid)
        self._notify(None)

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
