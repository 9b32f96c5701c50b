"""Helpers for turning chat model replies into text and retrying flaky calls."""

import re
import sys

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503})

# Backoff between attempts; replaced with tenacity.wait_none() in tests.
RETRY_WAIT = wait_exponential(multiplier=1, min=2, max=16)


def strip_fences(text: str) -> str:
    """Return the body of the first ``` fence, or the trimmed text if there is none."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def message_text(content) -> str:
    """Flatten a chat model's message content to plain text.

    Some chat models return a list of content blocks instead of a string.
    """
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    # Provider SDK errors (openai, anthropic) expose the HTTP status directly.
    code = getattr(exc, "status_code", None)
    return code if isinstance(code, int) else None


def is_transient(exc: BaseException) -> bool:
    """True for network failures and throttling/5xx replies.

    SDKs wrap httpx errors in their own exception types, so the cause chain
    is searched as well.
    """
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError)):
            return True
        if _status_code(exc) in TRANSIENT_STATUS_CODES:
            return True
        exc = exc.__cause__
    return False


def invoke_with_retry(llm, messages, max_retries: int | None = None, label: str = "LLM"):
    """Call llm.invoke(messages), retrying transient failures with backoff.

    max_retries defaults to the configured llm_max_retries. Anything that is
    not transient (auth failures, bad requests) is raised on the first attempt.
    """
    from docforge.config import get_config

    if max_retries is None:
        max_retries = get_config().get("llm_max_retries", 3)

    def _log_retry(retry_state):
        print(
            f"[DocForge] {label}: transient error {retry_state.outcome.exception()!r}, "
            f"retry {retry_state.attempt_number}/{max_retries} "
            f"in {retry_state.next_action.sleep:.0f}s",
            file=sys.stderr,
        )

    @retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=RETRY_WAIT,
        retry=retry_if_exception(is_transient),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _invoke():
        return llm.invoke(messages)

    return _invoke()
