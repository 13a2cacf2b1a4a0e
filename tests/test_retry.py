"""Tests for retry logic with exponential backoff."""

import unittest
from unittest.mock import AsyncMock, call, patch

import httpx

from trademind.errors import ModelAPIError
from trademind.retry import backoff_delay_ms, is_retryable, with_retry


class SdkError(Exception):
    """Error that only carries a message attribute, like SDK errors do."""

    def __init__(self, message):
        super().__init__()
        self.message = message


class TestIsRetryable(unittest.TestCase):
    """Test transient error classification."""

    def test_retryable_statuses(self):
        for status in (429, 500, 503):
            self.assertTrue(is_retryable(ModelAPIError(status, "ERR", "x")), status)

    def test_fatal_statuses(self):
        for status in (400, 403, 404):
            self.assertFalse(is_retryable(ModelAPIError(status, "ERR", "x")), status)

    def test_status_in_message(self):
        self.assertTrue(is_retryable(RuntimeError("got 503 from upstream")))
        self.assertFalse(is_retryable(RuntimeError("got 400 from upstream")))

    def test_transport_errors(self):
        self.assertTrue(is_retryable(httpx.ConnectError("connection refused")))
        self.assertTrue(is_retryable(httpx.ReadTimeout("read timed out")))

    def test_network_words_in_message(self):
        self.assertTrue(is_retryable(RuntimeError("TypeError: Failed to fetch")))
        self.assertTrue(is_retryable(RuntimeError("Network request failed")))
        self.assertTrue(is_retryable(RuntimeError("Load failed")))

    def test_message_attribute_used(self):
        """Errors exposing only a message attribute are still classified."""
        self.assertTrue(is_retryable(SdkError("503 Service Unavailable")))
        self.assertFalse(is_retryable(SdkError("SAFETY")))

    def test_plain_objects(self):
        """Non-exception values use whatever message-like field exists."""
        self.assertTrue(is_retryable({"message": "429 Too Many Requests"}))
        self.assertFalse(is_retryable({"detail": "no message"}))
        self.assertFalse(is_retryable(object()))

    def test_missing_message_not_retryable(self):
        self.assertFalse(is_retryable(Exception()))

    def test_safety_block_not_retryable(self):
        self.assertFalse(is_retryable(ModelAPIError(None, "SAFETY", "Prompt blocked")))


class TestBackoffDelay(unittest.TestCase):

    def test_doubles_each_attempt(self):
        self.assertEqual(
            [backoff_delay_ms(i, 1000) for i in range(4)],
            [1000, 2000, 4000, 8000],
        )


class TestWithRetry(unittest.IsolatedAsyncioTestCase):
    """Test retry loop."""

    async def test_success_first_try(self):
        operation = AsyncMock(return_value="ok")
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await with_retry(operation)
        self.assertEqual(result, "ok")
        self.assertEqual(operation.await_count, 1)
        sleep.assert_not_awaited()

    async def test_retry_with_eventual_success(self):
        """Should back off 1s then 2s and return the final success."""
        operation = AsyncMock(side_effect=[
            ModelAPIError(503, "UNAVAILABLE", "overloaded"),
            httpx.ConnectError("connection reset"),
            "ok",
        ])
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await with_retry(operation, max_attempts=3, initial_delay_ms=1000)

        self.assertEqual(result, "ok")
        self.assertEqual(operation.await_count, 3)
        self.assertEqual(sleep.await_args_list, [call(1.0), call(2.0)])

    async def test_non_retryable_fails_immediately(self):
        """Fatal errors propagate on the first attempt with no delay."""
        error = ModelAPIError(403, "PERMISSION_DENIED", "API key not valid")
        operation = AsyncMock(side_effect=error)
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            with self.assertRaises(ModelAPIError) as ctx:
                await with_retry(operation)

        self.assertIs(ctx.exception, error)
        self.assertEqual(operation.await_count, 1)
        sleep.assert_not_awaited()

    async def test_exhausted_attempts_rethrow_last_error(self):
        """Caller sees the original last failure, not a wrapper."""
        errors = [ModelAPIError(503, "UNAVAILABLE", f"try {i}") for i in range(3)]
        operation = AsyncMock(side_effect=errors)
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            with self.assertRaises(ModelAPIError) as ctx:
                await with_retry(operation, max_attempts=3, initial_delay_ms=500)

        self.assertIs(ctx.exception, errors[-1])
        self.assertEqual(operation.await_count, 3)
        self.assertEqual(sleep.await_args_list, [call(0.5), call(1.0)])

    async def test_single_attempt_never_retries(self):
        operation = AsyncMock(side_effect=httpx.ConnectError("down"))
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            with self.assertRaises(httpx.ConnectError):
                await with_retry(operation, max_attempts=1)
        self.assertEqual(operation.await_count, 1)
        sleep.assert_not_awaited()

    async def test_invalid_max_attempts(self):
        with self.assertRaises(ValueError):
            await with_retry(AsyncMock(), max_attempts=0)

    async def test_retries_logged(self):
        operation = AsyncMock(side_effect=[RuntimeError("500 Internal"), "ok"])
        with patch("asyncio.sleep", new_callable=AsyncMock):
            with self.assertLogs("trademind.retry", level="WARNING") as logs:
                await with_retry(operation, label="Test call")
        self.assertIn("Test call attempt 1 failed. Retrying in 1000ms", logs.output[0])


if __name__ == "__main__":
    unittest.main()
