"""GLIMPS Detect lite v2 API client.

Submits files, fetches analysis results and builds the human-facing report
URLs. Every network call is a coroutine and honours a ``timeout=`` deadline.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from urllib.parse import quote
from typing import Any, Dict, Optional, Union

import httpx
import pydantic

from . import errors
from .config import API_PREFIX, REQUEST_TIMEOUT, TOKEN_HEADER
from .lifecycle import wait_for_file
from .logging_config import logger
from .models import Result, SubmitOptions, SubmitResponse, WaitForOptions

TOKEN_PATTERN = re.compile(r"[0-9a-fA-F]{8}(?:-[0-9a-fA-F]{8}){4}")


class Client:
    def __init__(
        self,
        endpoint: str,
        token: str,
        insecure: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not isinstance(endpoint, str) or not endpoint.strip():
            raise errors.ValidationError("endpoint must be a non-empty URL")
        if not isinstance(token, str) or not TOKEN_PATTERN.fullmatch(token):
            raise errors.ValidationError("bad token format, expected xxxxxxxx-xxxxxxxx-xxxxxxxx-xxxxxxxx-xxxxxxxx")

        self._endpoint = endpoint.strip().rstrip("/")
        self._token = token
        self._insecure = insecure
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(verify=not insecure, timeout=REQUEST_TIMEOUT)
        self._http = http_client

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def token(self) -> str:
        return self._token

    @property
    def insecure(self) -> bool:
        return self._insecure

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http

    def __repr__(self) -> str:
        return f"Client(endpoint={self._endpoint!r}, insecure={self._insecure})"

    async def aclose(self) -> None:
        """Close the default transport. An injected one is left to its owner."""
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ requests

    def _headers(self) -> Dict[str, str]:
        return {TOKEN_HEADER: self._token, "Accept": "application/json"}

    def _url(self, path: str) -> str:
        return f"{self._endpoint}{API_PREFIX}{path}"

    async def _request(self, method: str, path: str, timeout: Optional[float] = None, **kwargs: Any) -> httpx.Response:
        url = self._url(path)
        try:
            resp = await asyncio.wait_for(
                self._http.request(method, url, headers=self._headers(), **kwargs),
                timeout,
            )
        except asyncio.TimeoutError as exc:
            raise errors.TimeoutError(f"{method} {path} did not complete within {timeout}s") from exc
        except httpx.TimeoutException as exc:
            raise errors.TimeoutError(f"{method} {path} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.info("request.failed", method=method, path=path, error=str(exc))
            raise errors.TransportError(f"error sending request to {url}: {exc}") from exc

        if not resp.is_success:
            error_cls = errors.error_for_status(resp.status_code)
            raise error_cls(
                f"invalid response from endpoint, {resp.status_code} {resp.reason_phrase}: {resp.text}",
                status_code=resp.status_code,
                reason=resp.reason_phrase,
                body=resp.text,
            )
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise errors.DecodeError(f"invalid JSON in response: {exc}", body=resp.text) from exc

    def _decode_result(self, resp: httpx.Response) -> Result:
        payload = self._decode(resp)
        try:
            return Result.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise errors.DecodeError(f"unexpected result shape: {exc}", body=resp.text) from exc

    async def submit_file(
        self,
        path: Union[str, os.PathLike],
        options: Optional[SubmitOptions] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        """Send a file for analysis and return the uuid assigned by the service."""
        options = options or SubmitOptions()
        path = Path(path)
        filename = options.filename or path.name
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise errors.FileError(f"could not open {path}: {exc}") from exc

        with handle:
            resp = await self._request(
                "POST",
                "/submit",
                timeout=timeout,
                data=options.form_fields(),
                files={"file": (filename, handle, "application/octet-stream")},
            )

        payload = self._decode(resp)
        try:
            submitted = SubmitResponse.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise errors.DecodeError(f"unexpected submission response: {exc}", body=resp.text) from exc
        if not submitted.status:
            raise errors.SubmissionError(f"submission of {filename} rejected by endpoint: {resp.text}", body=resp.text)
        if not submitted.uuid:
            raise errors.DecodeError(f"submission of {filename} accepted without a uuid: {resp.text}", body=resp.text)

        logger.info("submit.accepted", filename=filename, uuid=submitted.uuid)
        return submitted.uuid

    async def get_result_by_uuid(self, uuid: str, *, timeout: Optional[float] = None) -> Result:
        resp = await self._request("GET", f"/results/{quote(uuid, safe='')}", timeout=timeout)
        return self._decode_result(resp)

    async def get_result_by_sha256(self, sha256: str, *, timeout: Optional[float] = None) -> Result:
        resp = await self._request("GET", f"/search/{quote(sha256, safe='')}", timeout=timeout)
        return self._decode_result(resp)

    async def get_full_submission_by_uuid(self, uuid: str, *, timeout: Optional[float] = None) -> Any:
        """Fetch the complete report; its layout is left undecoded beyond JSON."""
        resp = await self._request("GET", f"/results/{quote(uuid, safe='')}/full", timeout=timeout)
        return self._decode(resp)

    async def wait_for_file(
        self,
        path: Union[str, os.PathLike],
        options: Optional[WaitForOptions] = None,
    ) -> Result:
        """Submit ``path`` and poll until the service marks the analysis done."""
        return await wait_for_file(self, path, options or WaitForOptions())

    # ---------------------------------------------------------------- view URLs

    def extract_token_view_url(self, result: Result) -> str:
        if not result.token:
            raise errors.MissingFieldError(f"result {result.uuid or '?'} has no view token")
        return f"{self._endpoint}/expert/en/analysis-redirect/{result.token}"

    def extract_expert_view_url(self, result: Result) -> str:
        if not result.sid:
            raise errors.MissingFieldError(f"result {result.uuid or '?'} has no expert sid")
        return f"{self._endpoint}/expert/en/analysis/advanced/{result.sid}"
