from typing import Any

import httpx

from po_upload.auth.exceptions import AuthenticationError, IdentityError
from po_upload.auth.models import Session
from po_upload.logging.logger import Log


class SupabaseIdentityProvider:
    """Email/password sessions backed by Supabase Auth.

    This class holds no session state of its own; every check asks the
    provider about the access token it is given.
    """

    def __init__(
        self,
        *,
        supabase_url: str,
        anon_key: str,
        timeout_seconds: float = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._anon_key = anon_key
        self._client = httpx.Client(
            base_url=f"{supabase_url.rstrip('/')}/auth/v1",
            timeout=timeout_seconds,
            headers={"apikey": anon_key},
            transport=transport,
        )

    def get_session(self, access_token: str | None) -> Session | None:
        """Return the session for ``access_token``, or None if the provider rejects it.

        Raises:
            IdentityError: if the provider is unreachable or fails.
        """
        if not access_token:
            return None
        response = self._send("GET", "/user", headers=self._bearer(access_token))
        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise IdentityError(f"Identity provider returned {response.status_code}")
        user = response.json()
        return Session(user_id=str(user["id"]), email=user.get("email"), access_token=access_token)

    def sign_in(self, email: str, password: str) -> Session:
        """Exchange credentials for a session.

        Raises:
            AuthenticationError: if the provider rejects the credentials.
        """
        response = self._send(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.is_error:
            raise AuthenticationError(self._error_message(response))
        Log.info(f"Signed in {email}")
        return self._session_from(response.json())

    def sign_up(self, email: str, password: str) -> Session | None:
        """Register a user. Returns None when the provider requires email confirmation first."""
        response = self._send("POST", "/signup", json={"email": email, "password": password})
        if response.is_error:
            raise AuthenticationError(self._error_message(response))
        body = response.json()
        Log.info(f"Signed up {email}")
        return self._session_from(body) if body.get("access_token") else None

    def sign_out(self, access_token: str) -> None:
        response = self._send("POST", "/logout", headers=self._bearer(access_token))
        if response.is_error and response.status_code not in (401, 403):
            raise IdentityError(f"Sign-out failed with {response.status_code}")

    def close(self) -> None:
        self._client.close()

    def _bearer(self, access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise IdentityError(f"Identity provider unreachable: {exc}") from exc

    @staticmethod
    def _session_from(body: dict[str, Any]) -> Session:
        user = body.get("user") or {}
        return Session(
            user_id=str(user.get("id", "")),
            email=user.get("email"),
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return str(
            body.get("error_description") or body.get("msg") or body.get("message") or body
        )
