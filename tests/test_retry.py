import httpx
import pytest

from directus_source.client.exceptions import TransportError
from directus_source.client.retry import fetch_with_retry


class FlakyTransport:
    """Drops the first ``failures`` connections, then answers with ``status``."""

    def __init__(self, failures: int, status: int = 200):
        self.failures = failures
        self.status = status
        self.attempts = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise httpx.ConnectError("connection dropped", request=request)
        return httpx.Response(self.status, json={"ok": True})


class TestFetchWithRetry:
    @pytest.mark.asyncio
    async def test_first_attempt_succeeds_without_waiting(self, sleep):
        transport = FlakyTransport(failures=0)
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
            response = await fetch_with_retry(
                client, "https://cms.example.com/files", retries=5, sleep=sleep
            )

        assert response.status_code == 200
        assert transport.attempts == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [1, 2, 4])
    async def test_recovers_after_transport_failures(self, sleep, failures):
        transport = FlakyTransport(failures=failures)
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
            response = await fetch_with_retry(
                client, "https://cms.example.com/files", retries=5, sleep=sleep
            )

        assert response.json() == {"ok": True}
        assert transport.attempts == failures + 1
        assert sleep.delays == [2.0**attempt for attempt in range(1, failures + 1)]

    @pytest.mark.asyncio
    async def test_gives_up_after_exactly_retries_attempts(self, sleep):
        transport = FlakyTransport(failures=100)
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
            with pytest.raises(TransportError) as exc_info:
                await fetch_with_retry(
                    client, "https://cms.example.com/files", retries=3, sleep=sleep
                )

        assert transport.attempts == 3
        assert sleep.delays == [2.0, 4.0]
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert str(exc_info.value).startswith("directus-source: ")

    @pytest.mark.asyncio
    async def test_http_error_status_is_not_retried(self, sleep):
        transport = FlakyTransport(failures=0, status=503)
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
            response = await fetch_with_retry(
                client,
                "https://cms.example.com/graphql",
                retries=5,
                method="POST",
                sleep=sleep,
                json={"query": "{ __typename }"},
            )

        assert response.status_code == 503
        assert transport.attempts == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_streamed_response_is_left_unread(self, sleep):
        transport = FlakyTransport(failures=2)
        async with httpx.AsyncClient(transport=httpx.MockTransport(transport)) as client:
            response = await fetch_with_retry(
                client,
                "https://cms.example.com/assets/f1",
                retries=5,
                sleep=sleep,
                stream=True,
            )
            try:
                assert not response.is_stream_consumed
                await response.aread()
                assert response.json() == {"ok": True}
            finally:
                await response.aclose()

        assert transport.attempts == 3
        assert sleep.delays == [2.0, 4.0]
