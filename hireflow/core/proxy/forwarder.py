"""
Webhook forwarding with not-found fallback.

The inbound multipart submission is captured once as a list of entries and
re-materialized for every attempt, because a multipart stream cannot be
replayed. Only a 404 moves on to the next candidate URL; any other status
means the endpoint exists and its answer is authoritative.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from starlette.datastructures import FormData, UploadFile

from hireflow.core.proxy.endpoints import resolve_webhook_endpoints
from hireflow.utils.constants import DEFAULT_CONTENT_TYPE
from hireflow.utils.logger import LoggerMixin

NOT_FOUND = 404
NO_RESPONSE_MESSAGE = "No response from n8n"


@dataclass
class FormEntry:
    """One field of a multipart submission; file fields carry bytes."""

    name: str
    value: str = ""
    filename: Optional[str] = None
    content: bytes = b""
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def is_file(self) -> bool:
        return self.filename is not None


@dataclass
class ForwardResult:
    """What the proxy relays back to its caller."""

    status_code: int
    payload: Any
    url: Optional[str] = None
    attempts: list[tuple[str, int]] = field(default_factory=list)


async def read_form_entries(form: FormData) -> list[FormEntry]:
    """Capture a parsed form as replayable entries, keeping repeated keys."""
    entries: list[FormEntry] = []
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            entries.append(
                FormEntry(
                    name=name,
                    filename=value.filename or name,
                    content=await value.read(),
                    content_type=value.content_type or DEFAULT_CONTENT_TYPE,
                )
            )
        else:
            entries.append(FormEntry(name=name, value=value))
    return entries


def build_multipart(entries: list[FormEntry]) -> list[tuple]:
    """
    Fresh httpx ``files`` argument for one attempt.

    Text fields go in as ``(None, value)`` parts so every entry keeps its
    original position in the body.
    """
    parts: list[tuple] = []
    for entry in entries:
        if entry.is_file:
            parts.append((entry.name, (entry.filename, entry.content, entry.content_type)))
        else:
            parts.append((entry.name, (None, entry.value)))
    return parts


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def decode_body(text: str) -> Any:
    """JSON when possible, otherwise the raw text wrapped in an object."""
    try:
        # NaN and Infinity cannot be serialized back out.
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return {"raw": text}


class WebhookForwarder(LoggerMixin):
    """
    Relays a submission to the first webhook candidate that is not a 404.

    Holds no per-request state, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        webhook_url: str,
        http_client: httpx.AsyncClient,
        timeout: float = 120.0,
    ) -> None:
        self.webhook_url = webhook_url
        self._http = http_client
        self._timeout = timeout

    async def forward(self, entries: list[FormEntry]) -> ForwardResult:
        """
        Try each resolved endpoint in order.

        Returns the first non-404 response, or the last 404 when every
        candidate is missing. Transport errors propagate to the caller.
        """
        candidates = resolve_webhook_endpoints(self.webhook_url)
        self.logger.info(f"Forwarding submission to n8n, {len(candidates)} candidate url(s)")

        attempts: list[tuple[str, int]] = []
        last: Optional[tuple[str, int, str]] = None

        for url in candidates:
            self.logger.info(f"Trying n8n url {url}")
            parts = build_multipart(entries)
            response = await self._http.post(
                url,
                files=parts or None,
                timeout=self._timeout,
                follow_redirects=True,
            )
            text = response.text
            attempts.append((url, response.status_code))
            last = (url, response.status_code, text)
            self.logger.info(f"n8n responded {response.status_code} from {url}")

            if response.status_code == NOT_FOUND:
                continue

            return ForwardResult(
                status_code=response.status_code,
                payload=decode_body(text),
                url=url,
                attempts=attempts,
            )

        if last is None:
            return ForwardResult(
                status_code=NOT_FOUND,
                payload=decode_body(NO_RESPONSE_MESSAGE),
                attempts=attempts,
            )

        url, status_code, text = last
        self.logger.warning(f"Every n8n candidate returned 404, relaying the last from {url}")
        return ForwardResult(
            status_code=status_code,
            payload=decode_body(text),
            url=url,
            attempts=attempts,
        )
