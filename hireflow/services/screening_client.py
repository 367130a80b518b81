"""
HTTP client for the resume-screening forwarding proxy.

Submits one resume plus its job/user context as multipart form data and
returns the proxy's status code and decoded JSON body.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from hireflow.core.exceptions import PipelineStepError
from hireflow.utils.logger import get_logger

logger = get_logger(__name__)

STEP = "submission"


@dataclass
class ScreeningResponse:
    """Status and decoded body relayed by the proxy."""

    status_code: int
    payload: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ScreeningProxyClient:
    """
    Posts resumes to the forwarding proxy.

    Usage:
        async with ScreeningProxyClient(proxy_url, timeout=180) as client:
            response = await client.submit(...)
    """

    def __init__(
        self,
        proxy_url: str,
        timeout: float = 180.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._proxy_url = proxy_url
        self._timeout = timeout
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "ScreeningProxyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def submit(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        job_id: str,
        job_title: str,
        user_id: str,
        resume_url: str,
    ) -> ScreeningResponse:
        """
        Submit one resume for screening.

        Raises:
            PipelineStepError: on transport failure, timeout or a body
                that is not JSON.
        """
        data = {
            "job_id": job_id,
            "job_title": job_title,
            "user_id": user_id,
            "resume_url": resume_url,
        }
        files = {"file": (filename, content, content_type)}

        try:
            response = await self._http.post(
                self._proxy_url, data=data, files=files, timeout=self._timeout
            )
        except httpx.TimeoutException as e:
            raise PipelineStepError(
                STEP, f"Screening request timed out after {self._timeout:g}s"
            ) from e
        except httpx.HTTPError as e:
            raise PipelineStepError(STEP, f"Screening request failed: {e}") from e

        logger.debug(f"Proxy answered {response.status_code} for {filename}")

        try:
            payload = response.json()
        except ValueError as e:
            raise PipelineStepError(
                STEP,
                f"Malformed response from screening service (HTTP {response.status_code})",
            ) from e

        return ScreeningResponse(status_code=response.status_code, payload=payload)
