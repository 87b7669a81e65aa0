"""Feishu (Lark) open-platform provider.

This module provides :class:`FeishuProvider`, the OAuth2-style client for
the Feishu open platform. It covers three groups of operations:

1. **Credential exchange** -- :meth:`~FeishuProvider.acquire_app_token` and
   :meth:`~FeishuProvider.acquire_tenant_token` obtain the application-level
   and tenant-level access tokens and cache them on the provider's
   :class:`~feishu_socialite.credential_store.CredentialStore`. Each comes
   in two variants: "internal" (self-built) apps authenticate with
   ``app_id``/``app_secret`` alone, while "default" (marketplace) apps must
   also present the ``app_ticket`` the platform pushes to them.
2. **User login** -- the web authorization-code flow
   (:meth:`~FeishuProvider.redirect`, :meth:`~FeishuProvider.token_from_code`,
   :meth:`~FeishuProvider.user_from_code`), the mini-program
   ``code2session`` check (:meth:`~FeishuProvider.code_to_session`) and the
   profile lookup (:meth:`~FeishuProvider.user_from_token`).
3. **Directory** -- :meth:`~FeishuProvider.fetch_directory_resource` and the
   employee, department and user listings built on it.

Every privileged call re-runs its credential exchange; tokens are cached
for reading by later calls but their validity window is never consulted.

See Also:
    :class:`feishu_socialite.providers.base.Provider` for the capability
    interface.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import quote, urlencode

import httpx

from feishu_socialite.config import load_provider_config
from feishu_socialite.credential_store import CredentialStore
from feishu_socialite.exceptions import (
    AuthorizeFailedError,
    BadRequestError,
    InvalidArgumentError,
    InvalidTicketError,
    InvalidTokenError,
    SocialiteError,
)
from feishu_socialite.models import (
    ProviderConfig,
    TokenResponse,
    User,
    normalize_token_response,
)
from feishu_socialite.transport import (
    bearer_headers,
    create_http_client,
    decode_json,
    filter_query,
)

logger = logging.getLogger(__name__)

AUTHORIZE_PATH = "/authen/v1/index"
ACCESS_TOKEN_PATH = "/authen/v1/access_token"
CHECK_SESSION_PATH = "/mina/v2/tokenLoginValidate"
USER_INFO_PATH = "/authen/v1/user_info"
APP_ACCESS_TOKEN_PATH = "/auth/v3/app_access_token/"
APP_ACCESS_TOKEN_INTERNAL_PATH = "/auth/v3/app_access_token/internal/"
TENANT_ACCESS_TOKEN_PATH = "/auth/v3/tenant_access_token/"
TENANT_ACCESS_TOKEN_INTERNAL_PATH = "/auth/v3/tenant_access_token/internal/"
EMPLOYEES_PATH = "/ehr/v1/employees"
DEPARTMENTS_PATH = "/contact/v3/departments"
CONTACT_USERS_PATH = "/contact/v3/users"

MISSING_TICKET_MESSAGE = "You are using default mode, please config 'app_ticket' first"
INVALID_TOKEN_RESPONSE = "Invalid token response"

# Active and resigned employees.
EMPLOYEE_STATUSES = [2, 4]


class FeishuProvider:
    """Authenticate users and read the directory of a Feishu tenant.

    Args:
        config: Provider settings, as a mapping or a
            :class:`~feishu_socialite.models.ProviderConfig`. Credential
            source descriptors (``env:``/``file:``) are resolved.
        http_client: Optional pre-built :class:`httpx.Client`. When omitted
            one is created lazily from the configured timeout.

    Example::

        provider = FeishuProvider({"client_id": "cli_a1", "client_secret": "s3cr3t",
                                   "app_mode": "internal"})
        url = provider.redirect("https://example.com/callback")
        # ... user comes back with ?code=...
        user = provider.user_from_code(code)
    """

    NAME = "feishu"
    expires_in_key = "refresh_expires_in"

    def __init__(
        self,
        config: Mapping[str, Any] | ProviderConfig,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = load_provider_config(config)
        self.credentials = CredentialStore.from_config(self.config)
        self.is_internal_app = self.config.is_internal_mode
        self._base_url = self.config.base_url.rstrip("/")
        self._redirect_url = self.config.redirect_url
        self._state: Optional[str] = None
        self._parameters: dict[str, Any] = {}
        self._http_client = http_client

    @property
    def name(self) -> str:
        return self.NAME

    # ------------------------------------------------------------------ #
    # Fluent configuration
    # ------------------------------------------------------------------ #

    def with_internal_app_mode(self) -> FeishuProvider:
        """Use the internal (self-built) app credential endpoints."""
        self.is_internal_app = True
        return self

    def with_default_mode(self) -> FeishuProvider:
        """Use the default (marketplace) app credential endpoints."""
        self.is_internal_app = False
        return self

    def with_app_ticket(self, app_ticket: str) -> FeishuProvider:
        """Store the ``app_ticket`` required by default-mode exchanges."""
        self.credentials.set("app_ticket", app_ticket)
        return self

    def with_redirect_url(self, redirect_url: str) -> FeishuProvider:
        self._redirect_url = redirect_url
        return self

    def with_state(self, state: str) -> FeishuProvider:
        self._state = state
        return self

    def with_parameters(self, parameters: Mapping[str, Any]) -> FeishuProvider:
        """Add extra query parameters to the authorize URL."""
        self._parameters.update(parameters)
        return self

    def get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = create_http_client(self.config)
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this provider created or was given one."""
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    # ------------------------------------------------------------------ #
    # Authorize redirect
    # ------------------------------------------------------------------ #

    def redirect(self, redirect_url: Optional[str] = None) -> str:
        """Build the authorize URL the user should be sent to.

        Args:
            redirect_url: Callback URL; overrides (and replaces) the
                configured default when given.

        Returns:
            ``{base_url}/authen/v1/index?redirect_uri=...&app_id=...``,
            plus any extra parameters and the ``state`` when set.
        """
        if redirect_url:
            self.with_redirect_url(redirect_url)

        query: dict[str, Any] = {
            "redirect_uri": self._redirect_url,
            "app_id": self.credentials.client_id,
            **self._parameters,
        }
        if self._state:
            query["state"] = self._state
        query = {key: value for key, value in query.items() if value is not None}
        return f"{self._url(AUTHORIZE_PATH)}?{urlencode(query, quote_via=quote)}"

    # ------------------------------------------------------------------ #
    # Credential exchange
    # ------------------------------------------------------------------ #

    def acquire_app_token(self) -> None:
        """Exchange app credentials for an ``app_access_token`` and store it.

        Internal apps post ``app_id``/``app_secret``; default apps also post
        the stored ``app_ticket``. The token is written to
        ``credentials.app_access_token`` only on success.

        Raises:
            InvalidTicketError: In default mode with no ``app_ticket``
                stored. No request is sent.
            InvalidTokenError: If the response has no ``app_access_token``.
            httpx.HTTPError: On transport failure or a non-2xx status.
        """
        with self.credentials.lock:
            body = self._exchange_credential(
                internal_path=APP_ACCESS_TOKEN_INTERNAL_PATH,
                default_path=APP_ACCESS_TOKEN_PATH,
                missing_ticket_error=InvalidTicketError,
            )
            token = body.get("app_access_token")
            if not token:
                raise InvalidTokenError("Invalid 'app_access_token' response", body)
            self.credentials.app_access_token = token

    def acquire_tenant_token(self) -> None:
        """Exchange app credentials for a ``tenant_access_token`` and store it.

        Mirrors :meth:`acquire_app_token` against the tenant endpoints, but
        reports a missing ticket as :class:`BadRequestError` and an unusable
        response as :class:`AuthorizeFailedError`.

        Raises:
            BadRequestError: In default mode with no ``app_ticket`` stored.
                No request is sent.
            AuthorizeFailedError: If the response has no
                ``tenant_access_token``.
            httpx.HTTPError: On transport failure or a non-2xx status.
        """
        with self.credentials.lock:
            body = self._exchange_credential(
                internal_path=TENANT_ACCESS_TOKEN_INTERNAL_PATH,
                default_path=TENANT_ACCESS_TOKEN_PATH,
                missing_ticket_error=BadRequestError,
            )
            token = body.get("tenant_access_token")
            if not token:
                raise AuthorizeFailedError("Invalid tenant_access_token response", body)
            self.credentials.tenant_access_token = token

    def _exchange_credential(
        self,
        internal_path: str,
        default_path: str,
        missing_ticket_error: type[SocialiteError],
    ) -> dict[str, Any]:
        """POST the app credentials to the mode-appropriate endpoint."""
        payload: dict[str, Any] = {
            "app_id": self.credentials.client_id,
            "app_secret": self.credentials.client_secret,
        }
        if self.is_internal_app:
            path = internal_path
        else:
            if not self.credentials.has("app_ticket"):
                raise missing_ticket_error(MISSING_TICKET_MESSAGE)
            path = default_path
            payload["app_ticket"] = self.credentials.app_ticket

        logger.debug(
            "Requesting credential from %s (%s mode)",
            path,
            "internal" if self.is_internal_app else "default",
        )
        response = self.get_http_client().post(self._url(path), json=payload)
        response.raise_for_status()
        return decode_json(response)

    # ------------------------------------------------------------------ #
    # Authorization code / mini-program session
    # ------------------------------------------------------------------ #

    def token_from_code(self, code: str) -> TokenResponse:
        """Exchange a web authorization code for user tokens.

        Raises:
            AuthorizeFailedError: If the response carries no ``data``.
            InvalidTicketError, InvalidTokenError: From the app token
                exchange.
        """
        self.acquire_app_token()
        response = self.get_http_client().post(
            self._url(ACCESS_TOKEN_PATH),
            json={
                "app_access_token": self.credentials.app_access_token,
                "code": code,
                "grant_type": "authorization_code",
            },
        )
        response.raise_for_status()
        return self._token_from_data(decode_json(response))

    def code_to_session(self, code: str) -> TokenResponse:
        """Validate a mini-program login code (``code2session``).

        Raises:
            AuthorizeFailedError: If the response carries no ``data``.
            InvalidTicketError, InvalidTokenError: From the app token
                exchange.
        """
        self.acquire_app_token()
        app_token = self.credentials.app_access_token
        response = self.get_http_client().post(
            self._url(CHECK_SESSION_PATH),
            headers=bearer_headers(app_token),
            json={"token": app_token, "code": code},
        )
        response.raise_for_status()
        return self._token_from_data(decode_json(response))

    def _token_from_data(self, body: dict[str, Any]) -> TokenResponse:
        data = body.get("data")
        if not data:
            raise AuthorizeFailedError(INVALID_TOKEN_RESPONSE, body)
        return normalize_token_response(data, self.expires_in_key)

    def user_from_code(self, code: str) -> User:
        """Run the authorization-code flow and return the signed-in user."""
        token = self.token_from_code(code)
        user = self.user_from_token(token.access_token or "")
        return user.with_token_response(token)

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def user_from_token(self, token: str) -> User:
        """Fetch the profile belonging to a user access token.

        Raises:
            InvalidArgumentError: If the response carries no ``data``.
        """
        profile = self._get_user_by_token(token)
        return self._map_user(profile).model_copy(
            update={"provider": self.NAME, "raw": profile, "access_token": token}
        )

    def _get_user_by_token(self, token: str) -> dict[str, Any]:
        response = self.get_http_client().get(
            self._url(USER_INFO_PATH),
            headers=bearer_headers(token),
            params=filter_query({"user_access_token": token}),
        )
        response.raise_for_status()
        body = decode_json(response)
        data = body.get("data")
        if not data or not isinstance(data, Mapping):
            raise InvalidArgumentError(
                "You have error! " + json.dumps(body, ensure_ascii=False), body
            )
        return dict(data)

    @staticmethod
    def _map_user(profile: Mapping[str, Any]) -> User:
        return User(
            id=profile.get("user_id"),
            name=profile.get("name"),
            nickname=profile.get("name"),
            avatar=profile.get("avatar_url"),
            email=profile.get("email"),
        )

    # ------------------------------------------------------------------ #
    # Directory
    # ------------------------------------------------------------------ #

    def fetch_directory_resource(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """GET a directory endpoint with a fresh tenant access token.

        Args:
            path: Endpoint path relative to the base URL.
            params: Query parameters. Empty values are dropped; list values
                are sent as repeated parameters.

        Returns:
            The response's ``data`` payload, unmodified.

        Raises:
            AuthorizeFailedError: If the platform answers HTTP 400 (message
                and body taken from the error response) or the response
                carries no ``data``.
            BadRequestError: From the tenant token exchange.
            httpx.HTTPError: For any other transport failure or status.
        """
        self.acquire_tenant_token()
        try:
            response = self.get_http_client().get(
                self._url(path),
                headers=bearer_headers(self.credentials.tenant_access_token),
                params=filter_query(params),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code != 400:
                raise
            error_body = decode_json(exc.response)
            logger.warning("Directory request %s rejected: %s", path, error_body.get("msg"))
            raise AuthorizeFailedError(
                str(error_body.get("msg") or exc.response.text), error_body
            ) from exc

        body = decode_json(response)
        if not body.get("data"):
            raise AuthorizeFailedError(INVALID_TOKEN_RESPONSE, body)
        return body["data"]

    def fetch_all_employees(self) -> Any:
        """List active and resigned employees, identified by ``union_id``."""
        return self.fetch_directory_resource(
            EMPLOYEES_PATH,
            {"status": EMPLOYEE_STATUSES, "user_id_type": "union_id"},
        )

    def fetch_contact_departments(self) -> Any:
        return self.fetch_directory_resource(
            DEPARTMENTS_PATH,
            {"status": EMPLOYEE_STATUSES, "user_id_type": "union_id"},
        )

    def fetch_contact_users(self) -> Any:
        return self.fetch_directory_resource(
            CONTACT_USERS_PATH, {"user_id_type": "union_id"}
        )

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"
