"""Tests for POST /api/complain: status mapping, localization, validation."""

import asyncio
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from ventapp.api.app import app
from ventapp.api.deps import get_app_settings, get_prompt_router
from ventapp.api.routes.complain import status_for
from ventapp.config import Settings
from ventapp.errors import ErrorKind
from ventapp.i18n import Language, error_message
from ventapp.llm.prompts import SystemPromptTable
from ventapp.llm.retry import RetryPolicy
from ventapp.llm.router import PromptRouter
from ventapp.llm.schemas import CompletionFailure, CompletionSuccess
from ventapp.llm.transport import ResilientTransport


@pytest.fixture()
def stub_router() -> AsyncMock:
    router = AsyncMock(spec=PromptRouter)
    router.handle = AsyncMock(return_value=CompletionSuccess(text="抱抱"))
    return router


@pytest.fixture()
async def client(
    stub_router: AsyncMock, test_settings: Settings
) -> AsyncGenerator[AsyncClient]:
    """AsyncClient with a stubbed PromptRouter (no outbound calls)."""
    app.dependency_overrides[get_prompt_router] = lambda: stub_router
    app.dependency_overrides[get_app_settings] = lambda: test_settings
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


class TestSuccess:
    async def test_returns_model_reply(
        self, client: AsyncClient, stub_router: AsyncMock
    ) -> None:
        response = await client.post(
            "/api/complain", json={"complaint": "又下雨了", "language": "zh"}
        )

        assert response.status_code == 200
        assert response.json() == {"response": "抱抱"}
        stub_router.handle.assert_awaited_once_with("又下雨了", Language.ZH)

    async def test_language_defaults_to_zh(
        self, client: AsyncClient, stub_router: AsyncMock
    ) -> None:
        response = await client.post("/api/complain", json={"complaint": "hi"})

        assert response.status_code == 200
        stub_router.handle.assert_awaited_once_with("hi", Language.ZH)

    async def test_english(self, client: AsyncClient, stub_router: AsyncMock) -> None:
        await client.post("/api/complain", json={"complaint": "hi", "language": "en"})
        stub_router.handle.assert_awaited_once_with("hi", Language.EN)


class TestFailureMapping:
    @pytest.mark.parametrize(
        ("kind", "status"),
        [
            (ErrorKind.TIMEOUT, 504),
            (ErrorKind.NETWORK_ERROR, 503),
            (ErrorKind.API_ERROR, 502),
            (ErrorKind.MALFORMED_RESPONSE, 500),
            (ErrorKind.UNKNOWN, 500),
        ],
    )
    async def test_status_and_localized_message(
        self,
        client: AsyncClient,
        stub_router: AsyncMock,
        kind: ErrorKind,
        status: int,
    ) -> None:
        stub_router.handle.return_value = CompletionFailure(kind, "upstream detail")
        response = await client.post(
            "/api/complain", json={"complaint": "hi", "language": "en"}
        )

        assert response.status_code == status
        assert status_for(kind) == status
        data = response.json()
        assert data["error"] == error_message(Language.EN, kind)
        assert "details" not in data

    async def test_chinese_message(
        self, client: AsyncClient, stub_router: AsyncMock
    ) -> None:
        stub_router.handle.return_value = CompletionFailure(ErrorKind.TIMEOUT, "t")
        response = await client.post("/api/complain", json={"complaint": "hi"})

        assert response.status_code == 504
        assert response.json()["error"] == error_message(Language.ZH, ErrorKind.TIMEOUT)

    async def test_details_only_in_development(
        self, client: AsyncClient, stub_router: AsyncMock
    ) -> None:
        dev_settings = Settings(environment="development", _env_file=None)  # type: ignore[arg-type]
        app.dependency_overrides[get_app_settings] = lambda: dev_settings
        stub_router.handle.return_value = CompletionFailure(
            ErrorKind.UNKNOWN, "KeyError: 'choices'"
        )
        response = await client.post("/api/complain", json={"complaint": "hi"})

        assert response.status_code == 500
        assert response.json()["details"] == "KeyError: 'choices'"

    async def test_unhandled_exception_hides_trace(self, stub_router: AsyncMock) -> None:
        stub_router.handle.side_effect = RuntimeError("secret internals")
        app.dependency_overrides[get_prompt_router] = lambda: stub_router
        try:
            async with AsyncClient(
                transport=ASGITransport(app=app, raise_app_exceptions=False),
                base_url="http://test",
            ) as ac:
                response = await ac.post("/api/complain", json={"complaint": "hi"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "secret internals" not in response.text

    async def test_unhandled_exception_json_in_development(
        self, stub_router: AsyncMock
    ) -> None:
        dev_settings = Settings(environment="development", _env_file=None)  # type: ignore[arg-type]
        stub_router.handle.side_effect = RuntimeError("secret internals")
        app.dependency_overrides[get_prompt_router] = lambda: stub_router
        app.dependency_overrides[get_app_settings] = lambda: dev_settings
        try:
            async with AsyncClient(
                transport=ASGITransport(app=app, raise_app_exceptions=False),
                base_url="http://test",
            ) as ac:
                response = await ac.post(
                    "/api/complain",
                    json={"complaint": "hi"},
                    headers={"Accept": "*/*"},
                )
        finally:
            app.dependency_overrides.clear()

        assert not app.debug
        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"error": "Internal server error"}
        assert "Traceback" not in response.text


class TestValidation:
    @pytest.mark.parametrize("language", ["fr", "zh-TW", "undefined"])
    async def test_unsupported_language_rejected(
        self, client: AsyncClient, stub_router: AsyncMock, language: str
    ) -> None:
        response = await client.post(
            "/api/complain", json={"complaint": "hi", "language": language}
        )

        assert response.status_code == 400
        assert "zh" in response.json()["error"]
        stub_router.handle.assert_not_called()

    @pytest.mark.parametrize("complaint", ["", "   ", "\n\t"])
    async def test_blank_complaint_rejected(
        self, client: AsyncClient, stub_router: AsyncMock, complaint: str
    ) -> None:
        response = await client.post(
            "/api/complain", json={"complaint": complaint, "language": "en"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Say something first."}
        stub_router.handle.assert_not_called()

    async def test_missing_complaint_field(self, client: AsyncClient) -> None:
        response = await client.post("/api/complain", json={"language": "en"})

        assert response.status_code == 400
        assert "error" in response.json()

    async def test_get_not_allowed(self, client: AsyncClient) -> None:
        response = await client.get("/api/complain")
        assert response.status_code == 405


class TestEndToEnd:
    """Real PromptRouter + ResilientTransport against a mocked upstream."""

    async def _post(
        self,
        handler,  # type: ignore[no-untyped-def]
        prompts: SystemPromptTable,
        settings: Settings,
        policy: RetryPolicy,
        sleep,  # type: ignore[no-untyped-def]
        payload: dict[str, str],
    ) -> httpx.Response:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as upstream:
            router = PromptRouter(
                ResilientTransport(upstream, policy, sleep=sleep),
                prompts,
                endpoint="https://openrouter.test/api/v1/chat/completions",
                api_key="sk-or-test",
                model="deepseek/deepseek-chat",
                site_url="https://ventapp.vercel.app",
                app_title="一起吐槽吧",
            )
            app.dependency_overrides[get_prompt_router] = lambda: router
            app.dependency_overrides[get_app_settings] = lambda: settings
            try:
                async with AsyncClient(
                    transport=ASGITransport(app=app), base_url="http://test"
                ) as ac:
                    return await ac.post("/api/complain", json=payload)
            finally:
                app.dependency_overrides.clear()

    @pytest.mark.parametrize("language", ["zh", "en"])
    async def test_success(
        self,
        prompt_table: SystemPromptTable,
        test_settings: Settings,
        make_completion_body,
        sleep_recorder,
        language: str,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=make_completion_body("you got this"))

        response = await self._post(
            handler,
            prompt_table,
            test_settings,
            RetryPolicy(),
            sleep_recorder,
            {"complaint": "exam tomorrow", "language": language},
        )

        assert response.status_code == 200
        assert response.json() == {"response": "you got this"}

    async def test_always_timing_out_gives_504(
        self, prompt_table: SystemPromptTable, test_settings: Settings, sleep_recorder
    ) -> None:
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.sleep(10)
            return httpx.Response(200)

        response = await self._post(
            handler,
            prompt_table,
            test_settings,
            RetryPolicy(max_attempts=3, attempt_timeout_s=0.01),
            sleep_recorder,
            {"complaint": "hi", "language": "en"},
        )

        assert response.status_code == 504
        assert calls == 3
        assert sleep_recorder.delays == [1.0, 2.0]

    async def test_upstream_error_gives_502_without_retry(
        self, prompt_table: SystemPromptTable, test_settings: Settings, sleep_recorder
    ) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(
                402, json={"error": {"message": "Insufficient credits"}}
            )

        response = await self._post(
            handler,
            prompt_table,
            test_settings,
            RetryPolicy(),
            sleep_recorder,
            {"complaint": "hi", "language": "en"},
        )

        assert response.status_code == 502
        assert response.json() == {"error": error_message(Language.EN, ErrorKind.API_ERROR)}
        assert calls == 1

    async def test_network_failure_gives_503(
        self, prompt_table: SystemPromptTable, test_settings: Settings, sleep_recorder
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known")

        response = await self._post(
            handler,
            prompt_table,
            test_settings,
            RetryPolicy(),
            sleep_recorder,
            {"complaint": "hi", "language": "zh"},
        )

        assert response.status_code == 503
        assert sleep_recorder.delays == [1.0, 2.0]
