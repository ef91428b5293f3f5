from __future__ import annotations

import dataclasses
import types
import typing as tp

import anyio
import httpx

from .._cache import EtagCache
from .._config import ClientConfig
from .._models import TokenPair
from ._http import AsyncApiTransport
from ._pipeline import SleepFunction
from ._services import (
    AsyncApiTokenService,
    AsyncApprovalService,
    AsyncAuthenticationService,
    AsyncDigitalSignatureService,
    AsyncDocumentService,
    AsyncDocumentTemplateService,
    AsyncEnvelopeService,
    AsyncEventService,
    AsyncNotificationService,
    AsyncOrganizationService,
    AsyncOrganizationSettingsService,
    AsyncPublicVerificationService,
    AsyncReceiptService,
    AsyncSectorService,
    AsyncSignatureFieldService,
    AsyncSignerService,
    AsyncUserService,
    AsyncWebhookService,
)

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = ("AsyncSignatureClient",)


class AsyncSignatureClient:
    """
    Client of the signature platform REST API.

    Either pass a `ClientConfig` or its fields as keyword arguments:

    ```python
    async with AsyncSignatureClient(base_url="https://api.example.com", access_token="...") as client:
        envelope = await client.envelopes.create({"name": "Contract"})
    ```

    :param config: Client configuration, defaults to None
    :type config: tp.Optional[ClientConfig], optional
    :param transport: Transport the requests are sent with, defaults to `httpx.AsyncHTTPTransport`
    :type transport: tp.Optional[httpx.AsyncBaseTransport], optional
    :param sleep: Coroutine function used to wait between retries, defaults to anyio.sleep
    :type sleep: SleepFunction, optional
    :raises ConfigurationError: When the base URL or both credentials are missing
    """

    def __init__(
        self,
        config: tp.Optional[ClientConfig] = None,
        *,
        transport: tp.Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunction = anyio.sleep,
        **options: tp.Any,
    ) -> None:
        if config is None:
            config = ClientConfig(**options)
        elif options:
            config = dataclasses.replace(config, **options)
        config.validate()

        self.config = config
        self.http = AsyncApiTransport(config, transport=transport, sleep=sleep)

        self.envelopes = AsyncEnvelopeService(self.http)
        self.documents = AsyncDocumentService(self.http)
        self.signers = AsyncSignerService(self.http)
        self.signature_fields = AsyncSignatureFieldService(self.http)
        self.templates = AsyncDocumentTemplateService(self.http)
        self.notifications = AsyncNotificationService(self.http)
        self.authentication = AsyncAuthenticationService(self.http)
        self.public_verification = AsyncPublicVerificationService(self.http)
        self.digital_signatures = AsyncDigitalSignatureService(self.http)
        self.users = AsyncUserService(self.http)
        self.api_tokens = AsyncApiTokenService(self.http)
        self.organizations = AsyncOrganizationService(self.http)
        self.organization_settings = AsyncOrganizationSettingsService(self.http)
        self.webhooks = AsyncWebhookService(self.http)
        self.events = AsyncEventService(self.http)
        self.approvals = AsyncApprovalService(self.http)
        self.receipts = AsyncReceiptService(self.http)
        self.sectors = AsyncSectorService(self.http)

    @property
    def cache(self) -> tp.Optional[EtagCache]:
        return self.http.cache

    def set_access_token(self, token: str) -> None:
        self.http.set_access_token(token)

    def set_refresh_token(self, token: str) -> None:
        self.http.set_refresh_token(token)

    async def login(self, email: str, password: str) -> tp.Dict[str, tp.Any]:
        """
        Authenticate with email and password.

        The returned access and refresh tokens are installed on the client,
        so later requests are authenticated and refreshed automatically.
        """
        auth = await self.http.post("/api/v1/auth/login", {"email": email, "password": password})
        tokens = auth["tokens"]
        self.set_access_token(tokens["accessToken"])
        self.set_refresh_token(tokens["refreshToken"])
        return tp.cast(tp.Dict[str, tp.Any], auth)

    async def refresh_token(self, refresh_token: str) -> TokenPair:
        tokens = await self.http.post(self.config.refresh_path, {"refreshToken": refresh_token})
        self.set_access_token(tokens["accessToken"])
        self.set_refresh_token(tokens["refreshToken"])
        return tp.cast(TokenPair, tokens)

    async def logout(self, refresh_token: str) -> None:
        await self.http.post("/api/v1/auth/logout", {"refreshToken": refresh_token})
        self.http.clear_refresh_token()

    async def logout_all(self) -> None:
        await self.http.post("/api/v1/auth/logout-all")
        self.http.clear_refresh_token()

    async def get_current_user(self) -> tp.Dict[str, tp.Any]:
        return tp.cast(tp.Dict[str, tp.Any], await self.http.get("/api/v1/auth/me"))

    async def health_check(self) -> tp.Dict[str, tp.Any]:
        return tp.cast(tp.Dict[str, tp.Any], await self.http.get("/api/v1/health"))

    async def health_check_ready(self) -> tp.Dict[str, tp.Any]:
        return tp.cast(tp.Dict[str, tp.Any], await self.http.get("/api/v1/health/ready"))

    async def health_check_live(self) -> tp.Dict[str, tp.Any]:
        return tp.cast(tp.Dict[str, tp.Any], await self.http.get("/api/v1/health/live"))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "Self":
        return self

    async def __aexit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        await self.aclose()
