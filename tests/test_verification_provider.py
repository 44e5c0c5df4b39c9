# tests/test_verification_provider.py
"""Twilio Verify provider against a local aiohttp server."""

import asyncio

import pytest
from aiohttp import test_utils, web

from src.infrastructure.providers.verification import ConsoleVerificationProvider, TwilioVerifyProvider
from src.shared.utilities.result import ErrorKind

SERVICE_SID = "VA123"


def twilio_app(handler):
    app = web.Application()
    app.router.add_post(f"/Services/{SERVICE_SID}/Verifications", handler)
    app.router.add_post(f"/Services/{SERVICE_SID}/VerificationCheck", handler)
    return app


def provider_for(server, timeout_seconds=2.0):
    return TwilioVerifyProvider(account_sid="AC1", auth_token="secret", service_sid=SERVICE_SID,
                                base_url=str(server.make_url("/")), timeout_seconds=timeout_seconds)


async def html_unavailable(request):
    return web.Response(status=503, text="<html><body>Service Unavailable</body></html>",
                        content_type="text/html")


class TestTwilioSend:
    @pytest.mark.asyncio
    async def test_pending_verification_is_success(self):
        async def handler(request):
            form = await request.post()
            assert form["To"] == "+97451270700"
            assert form["Channel"] == "sms"
            return web.json_response({"status": "pending"}, status=201)

        async with test_utils.TestServer(twilio_app(handler)) as server:
            result = await provider_for(server).send("+97451270700")

        assert result.ok

    @pytest.mark.asyncio
    async def test_html_error_page_is_send_failure(self):
        async with test_utils.TestServer(twilio_app(html_unavailable)) as server:
            result = await provider_for(server).send("+97451270700")

        assert result.error is ErrorKind.PROVIDER_SEND_FAILED
        assert result.message == "HTTP 503"

    @pytest.mark.asyncio
    async def test_json_error_message_is_kept(self):
        async def handler(request):
            return web.json_response({"message": "Invalid parameter `To`"}, status=400)

        async with test_utils.TestServer(twilio_app(handler)) as server:
            result = await provider_for(server).send("+97451270700")

        assert result.error is ErrorKind.PROVIDER_SEND_FAILED
        assert result.message == "Invalid parameter `To`"

    @pytest.mark.asyncio
    async def test_html_success_body_is_send_failure(self):
        async def handler(request):
            return web.Response(status=200, text="<html>ok</html>", content_type="text/html")

        async with test_utils.TestServer(twilio_app(handler)) as server:
            result = await provider_for(server).send("+97451270700")

        assert result.error is ErrorKind.PROVIDER_SEND_FAILED

    @pytest.mark.asyncio
    async def test_slow_provider_times_out(self):
        async def handler(request):
            await asyncio.sleep(0.5)
            return web.json_response({"status": "pending"})

        async with test_utils.TestServer(twilio_app(handler)) as server:
            result = await provider_for(server, timeout_seconds=0.05).send("+97451270700")

        assert result.error is ErrorKind.PROVIDER_SEND_FAILED


class TestTwilioCheck:
    @pytest.mark.asyncio
    async def test_approved_code(self):
        async def handler(request):
            form = await request.post()
            return web.json_response({"status": "approved" if form["Code"] == "123456" else "pending"})

        async with test_utils.TestServer(twilio_app(handler)) as server:
            provider = provider_for(server)
            approved = await provider.check("+97451270700", "123456")
            pending = await provider.check("+97451270700", "000000")

        assert approved.ok
        assert pending.error is ErrorKind.PROVIDER_VERIFY_FAILED
        assert pending.message == "Verification status: pending"

    @pytest.mark.asyncio
    async def test_html_error_page_is_verify_failure(self):
        async with test_utils.TestServer(twilio_app(html_unavailable)) as server:
            result = await provider_for(server).check("+97451270700", "123456")

        assert result.error is ErrorKind.PROVIDER_VERIFY_FAILED


class TestConsoleProvider:
    @pytest.mark.asyncio
    async def test_accepts_only_configured_code(self):
        provider = ConsoleVerificationProvider(code="654321")

        assert (await provider.send("+97451270700")).ok
        assert (await provider.check("+97451270700", "654321")).ok
        assert (await provider.check("+97451270700", "123456")).error is ErrorKind.PROVIDER_VERIFY_FAILED
