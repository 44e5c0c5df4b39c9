# Path: src/infrastructure/providers/verification.py
import asyncio
from abc import ABC, abstractmethod

import aiohttp

from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.utilities.result import ErrorKind, Result

logger = LoggingService(LogConfig())


class VerificationProvider(ABC):
    """
    Delivers and checks one-time codes.

    The provider owns the code itself; callers only ever see whether sending
    or checking succeeded, plus a human-readable reason when it did not.
    """

    name: str = "provider"

    @abstractmethod
    async def send(self, phone_e164: str) -> Result[None]:
        ...

    @abstractmethod
    async def check(self, phone_e164: str, code: str) -> Result[None]:
        ...


class TwilioVerifyProvider(VerificationProvider):
    """Twilio Verify v2 over its REST API."""

    name = "twilio"

    def __init__(self, account_sid: str = None, auth_token: str = None, service_sid: str = None,
                 base_url: str = None, channel: str = None, timeout_seconds: float = None):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.service_sid = service_sid or settings.TWILIO_VERIFY_SERVICE_SID
        self.base_url = (base_url or settings.TWILIO_VERIFY_BASE_URL).rstrip("/")
        self.channel = channel or settings.TWILIO_CHANNEL
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds or settings.TWILIO_TIMEOUT_SECONDS)

    def _url(self, resource: str) -> str:
        return f"{self.base_url}/Services/{self.service_sid}/{resource}"

    async def _post(self, resource: str, form: dict) -> dict:
        auth = aiohttp.BasicAuth(self.account_sid, self.auth_token)
        async with aiohttp.ClientSession(auth=auth, timeout=self.timeout) as session:
            async with session.post(self._url(resource), data=form) as response:
                payload = None
                try:
                    payload = await response.json(content_type=None)
                except ValueError:
                    # Gateway error pages are often HTML
                    if response.status < 400:
                        raise
                if response.status >= 400:
                    message = (payload or {}).get("message") if isinstance(payload, dict) else None
                    raise aiohttp.ClientResponseError(
                        response.request_info, response.history, status=response.status,
                        message=message or f"HTTP {response.status}"
                    )
                return payload if isinstance(payload, dict) else {}

    async def send(self, phone_e164: str) -> Result[None]:
        try:
            payload = await self._post("Verifications", {"To": phone_e164, "Channel": self.channel})
            logger.info("Verification sent", context={"phone": phone_e164, "status": payload.get("status")})
            return Result.success()
        except aiohttp.ClientResponseError as e:
            logger.warning("Verification send rejected", context={"phone": phone_e164, "status": e.status,
                                                                  "error": e.message})
            return Result.failure(ErrorKind.PROVIDER_SEND_FAILED, e.message)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Verification provider unreachable", context={"phone": phone_e164,
                                                                       "error": str(e) or type(e).__name__})
            return Result.failure(ErrorKind.PROVIDER_SEND_FAILED, str(e) or type(e).__name__)

    async def check(self, phone_e164: str, code: str) -> Result[None]:
        try:
            payload = await self._post("VerificationCheck", {"To": phone_e164, "Code": code})
        except aiohttp.ClientResponseError as e:
            logger.warning("Verification check rejected", context={"phone": phone_e164, "status": e.status,
                                                                   "error": e.message})
            return Result.failure(ErrorKind.PROVIDER_VERIFY_FAILED, e.message)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Verification provider unreachable", context={"phone": phone_e164,
                                                                       "error": str(e) or type(e).__name__})
            return Result.failure(ErrorKind.PROVIDER_VERIFY_FAILED, str(e) or type(e).__name__)

        status = payload.get("status")
        if status == "approved":
            return Result.success()
        logger.info("Verification check not approved", context={"phone": phone_e164, "status": status})
        return Result.failure(ErrorKind.PROVIDER_VERIFY_FAILED, f"Verification status: {status}")


class ConsoleVerificationProvider(VerificationProvider):
    """Development provider: nothing is sent, the configured fallback code always verifies."""

    name = "console"

    def __init__(self, code: str = None):
        self.code = code or settings.OTP_DEV_FALLBACK_CODE

    async def send(self, phone_e164: str) -> Result[None]:
        logger.info("Console verification issued", context={"phone": phone_e164, "fallback_code": self.code})
        return Result.success()

    async def check(self, phone_e164: str, code: str) -> Result[None]:
        if code == self.code:
            return Result.success()
        return Result.failure(ErrorKind.PROVIDER_VERIFY_FAILED, "Code does not match")


def build_verification_provider(kind: str = None) -> VerificationProvider:
    kind = (kind or settings.VERIFICATION_PROVIDER).lower()
    if kind == "twilio":
        return TwilioVerifyProvider()
    return ConsoleVerificationProvider()
