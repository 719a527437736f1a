"""
HTTP client for the issuer directory and issuer key sets.

This module provides an async client that downloads the directory document
and each issuer's published JWK set. Directory failures raise; key set
failures are returned as error records so one issuer never affects another.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
import asyncio
import time

import httpx

from .enums import FetchErrorCode, FetchStatus
from .exceptions import NetworkError, ParseError
from .models import Directory, Issuer, Key

JWKS_PATH = "/.well-known/jwks.json"
DEFAULT_TIMEOUT_SECONDS = 5.0


def jwks_url(iss: str) -> str:
    """Get the key set URL of an issuer."""
    return iss + JWKS_PATH


@dataclass
class KeySetError:
    """Error information from a key set fetch."""

    code: FetchErrorCode
    message: str
    http_status_code: Optional[int] = None

    def describe(self) -> str:
        """Human-readable form recorded in the directory log."""
        return f"{self.code.value}: {self.message}"


@dataclass
class KeySetResponse:
    """Complete key set fetch response."""

    status: FetchStatus
    url: str
    keys: list[Key] = field(default_factory=list)
    error: Optional[KeySetError] = None
    http_status_code: int = 0
    response_time_ms: float = 0.0


class JWKSClient:
    """
    Async client for the directory document and issuer JWK sets.

    Every request is a single attempt bounded by one timeout. TLS
    certificates are verified and redirects are followed.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the network)
        """
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "JWKSClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def timeout(self) -> float:
        return self._timeout

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def fetch_directory(self, directory_url: str) -> Directory:
        """
        Download and parse the issuer directory.

        Args:
            directory_url: URL of the directory document

        Returns:
            The parsed directory

        Raises:
            NetworkError: If the directory is unreachable, times out or
                answers with a non-success status
            ParseError: If the body is not a directory document
        """
        try:
            response = await self._get(directory_url)
        except httpx.TimeoutException as e:
            raise NetworkError(
                code=FetchErrorCode.TIMEOUT.value,
                message=f"Directory request timed out after {self._timeout}s",
                details={"url": directory_url},
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(
                code=FetchErrorCode.NETWORK_ERROR.value,
                message=f"Can't connect to directory: {e}",
                details={"url": directory_url},
            ) from e

        if not response.is_success:
            raise NetworkError(
                code=FetchErrorCode.HTTP_ERROR.value,
                message=f"Directory answered with HTTP {response.status_code}",
                details={"url": directory_url, "status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(
                code=FetchErrorCode.PARSE_ERROR.value,
                message=f"Can't parse issuer directory: {e}",
                details={"url": directory_url},
            ) from e

        try:
            return Directory.from_dict(data)
        except ParseError as e:
            e.details.setdefault("url", directory_url)
            raise

    async def fetch_key_set(self, issuer: Issuer) -> KeySetResponse:
        """
        Download and parse an issuer's JWK set.

        Args:
            issuer: The issuer whose key set to fetch

        Returns:
            KeySetResponse holding either the keys or the error
        """
        start_time = time.perf_counter()
        url = jwks_url(issuer.iss)
        try:
            response = await self._get(url)
        except httpx.TimeoutException:
            return self._error_response(
                url,
                FetchErrorCode.TIMEOUT,
                f"Request to {url} timed out after {self._timeout}s",
                start_time,
            )
        except httpx.ConnectError as e:
            error_msg = str(e)
            if "ssl" in error_msg.lower() or "certificate" in error_msg.lower():
                return self._error_response(
                    url, FetchErrorCode.TLS_ERROR,
                    f"TLS connection error for {url}: {error_msg}", start_time,
                )
            return self._error_response(
                url, FetchErrorCode.NETWORK_ERROR,
                f"Can't reach {url}: {error_msg}", start_time,
            )
        except httpx.HTTPError as e:
            return self._error_response(
                url, FetchErrorCode.NETWORK_ERROR,
                f"Request to {url} failed: {e}", start_time,
            )
        # an iss that is not a URL at all
        except (httpx.InvalidURL, ValueError) as e:
            return self._error_response(
                url, FetchErrorCode.NETWORK_ERROR,
                f"Invalid key set URL {url}: {e}", start_time,
            )

        if not response.is_success:
            return self._error_response(
                url,
                FetchErrorCode.HTTP_ERROR,
                f"Response code {response.status_code} ({response.reason_phrase}) from {url}",
                start_time,
                http_status_code=response.status_code,
            )

        try:
            keys = self._parse_key_set(response.json())
        except ValueError as e:
            return self._error_response(
                url,
                FetchErrorCode.PARSE_ERROR,
                f"Failed to parse JSON key set from {url}: {e}",
                start_time,
                http_status_code=response.status_code,
            )
        except ParseError as e:
            return self._error_response(
                url,
                FetchErrorCode.PARSE_ERROR,
                f"{e.message} ({url})",
                start_time,
                http_status_code=response.status_code,
            )

        return KeySetResponse(
            status=FetchStatus.OK,
            url=url,
            keys=keys,
            http_status_code=response.status_code,
            response_time_ms=self._elapsed_ms(start_time),
        )

    async def _get(self, url: str) -> httpx.Response:
        """
        GET a URL within one overall deadline.

        httpx applies its timeout per connect/read/write phase, so a server
        trickling its body could run past it; the whole request is capped here.
        """
        try:
            return await asyncio.wait_for(self._ensure_client().get(url), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise httpx.TimeoutException(f"Request to {url} exceeded {self._timeout}s") from e

    def _parse_key_set(self, json_data: Any) -> list[Key]:
        """
        Extract the keys of a JWK set document.

        Raises:
            ParseError: If the document has no 'keys' array of objects
        """
        if not isinstance(json_data, dict) or not isinstance(json_data.get("keys"), list):
            raise ParseError(
                code=FetchErrorCode.PARSE_ERROR.value,
                message="Key set is missing a 'keys' array",
            )
        return [Key.from_dict(entry) for entry in json_data["keys"]]

    def _error_response(
        self,
        url: str,
        code: FetchErrorCode,
        message: str,
        start_time: float,
        http_status_code: Optional[int] = None,
    ) -> KeySetResponse:
        return KeySetResponse(
            status=FetchStatus.ERROR,
            url=url,
            keys=[],
            error=KeySetError(code=code, message=message, http_status_code=http_status_code),
            http_status_code=http_status_code or 0,
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
