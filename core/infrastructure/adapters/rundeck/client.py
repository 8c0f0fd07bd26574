"""
RunDeck Client Implementation.

Talks to the RunDeck REST API over HTTP with aiohttp.
"""
from typing import Any, Dict, Optional
import asyncio
import json
import logging

import aiohttp

from core.application.interfaces import IRemoteExecutionClient
from core.domain.entities import Execution
from core.domain.exceptions import (
    AuthenticationError,
    InvalidArgumentError,
    ProtocolError,
    RemoteServiceError,
)
from core.domain.value_objects import LogSegment
from core.settings.sections.rundeck import RundeckSettings

from .mapper import RundeckMapper


logger = logging.getLogger(__name__)


class RundeckClient(IRemoteExecutionClient):
    """
    aiohttp implementation of the remote execution client.

    One instance can be shared by any number of monitors: requests carry
    all their state, the underlying ClientSession is only a connection pool.
    """

    def __init__(
        self,
        settings: RundeckSettings,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize RunDeck client.

        Args:
            settings: Connection settings (URL, credentials, API version)
            session: Optional shared session; created lazily when omitted
        """
        self.settings = settings
        self.base_url = settings.url
        self.api_url = f"{self.base_url}/api/{settings.api_version}"
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=settings.request_timeout)
        logger.info(f"RundeckClient initialized for {self.api_url}")

    async def __aenter__(self) -> "RundeckClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session and self._session is not None:
            if not self._session.closed:
                await self._session.close()
            self._session = None

    # =========================================================================
    # IRemoteExecutionClient
    # =========================================================================

    async def get_status(self, execution_id: str) -> Execution:
        """Fetch the current snapshot of an execution."""
        data = await self._request("GET", f"/execution/{execution_id}")
        return RundeckMapper.to_execution(data, self.base_url)

    async def get_log_segment(self, execution_id: str, from_offset: int) -> LogSegment:
        """Fetch execution output produced since ``from_offset``."""
        if from_offset < 0:
            raise InvalidArgumentError(
                f"Log offset cannot be negative, got: {from_offset}"
            )
        data = await self._request(
            "GET",
            f"/execution/{execution_id}/output",
            params={"offset": str(from_offset)},
        )
        return RundeckMapper.to_log_segment(data, execution_id)

    async def trigger_job(
        self,
        job_id: str,
        options: Optional[Dict[str, str]] = None,
        node_filters: Optional[Dict[str, str]] = None,
    ) -> Execution:
        """Run a job and return the started execution."""
        if not job_id:
            raise InvalidArgumentError("Job id is required")

        body: Dict[str, Any] = {"options": dict(options or {})}
        if node_filters:
            body["filter"] = " ".join(f"{key}:{value}" for key, value in node_filters.items())

        data = await self._request("POST", f"/job/{job_id}/run", payload=body)

        # Older API versions wrap the execution in a list
        if isinstance(data, dict) and isinstance(data.get("executions"), list):
            if not data["executions"]:
                raise ProtocolError(f"Running job {job_id} returned no execution")
            data = data["executions"][0]

        execution = RundeckMapper.to_execution(data, self.base_url)
        logger.info(f"Job {job_id} started execution #{execution.id} ({execution.url})")
        return execution

    async def ping(self) -> None:
        """Check that the server answers at all."""
        await self._request("GET", "/system/info", authenticated=False)

    async def test_credentials(self) -> None:
        """Check that the configured credentials are accepted."""
        await self._request("GET", "/system/info")

    # =========================================================================
    # HTTP
    # =========================================================================

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    def _auth(self, authenticated: bool):
        headers = {"Accept": "application/json"}
        auth = None
        if authenticated:
            if self.settings.auth_token:
                headers["X-Rundeck-Auth-Token"] = self.settings.auth_token
            elif self.settings.username:
                auth = aiohttp.BasicAuth(self.settings.username, self.settings.password or "")
        return headers, auth

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Send one request and decode its JSON body.

        Raises:
            AuthenticationError: On 401/403
            InvalidArgumentError: On 400/404
            RemoteServiceError: On other HTTP errors, network errors and timeouts
            ProtocolError: On a body that cannot be decoded or is not JSON
        """
        url = f"{self.api_url}{path}"
        headers, auth = self._auth(authenticated)
        session = self._get_session()

        logger.debug(f"[RUNDECK] {method} {url} params={params}")

        try:
            async with session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=headers,
                auth=auth,
                timeout=self._timeout,
            ) as response:
                body = await response.read()
                status = response.status
                charset = response.charset or "utf-8"
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RemoteServiceError(f"{method} {url} failed: {exc!r}") from exc

        try:
            text = body.decode(charset)
        except (UnicodeDecodeError, LookupError) as exc:
            if status < 300:
                raise ProtocolError(
                    f"{method} {url} returned a body that is not valid {charset}: {body[:300]!r}"
                ) from exc
            # Error bodies only end up in messages
            text = body.decode("utf-8", errors="replace")

        if status in (401, 403):
            raise AuthenticationError(
                f"Credentials rejected by {self.base_url} (HTTP {status})"
            )
        if status in (400, 404):
            raise InvalidArgumentError(f"{method} {url} -> HTTP {status}: {text[:300]}")
        if status >= 300:
            raise RemoteServiceError(f"{method} {url} -> HTTP {status}: {text[:300]}")

        try:
            return json.loads(text)
        except ValueError as exc:
            raise ProtocolError(f"{method} {url} returned a non-JSON body: {text[:300]!r}") from exc
