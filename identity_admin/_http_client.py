# Copyright 2020 Google Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Internal HTTP client module.

This module provides the transports used to talk to the Identity Toolkit service: a blocking
client built on the requests library, and an asyncio client built on HTTPX. Both apply Google
credentials to outgoing requests and leave retries to the configured transport policy.
"""

import logging
import typing

import google.auth.credentials
import google.auth.transport.requests
import httpx
import requests
import requests.adapters
import requests.structures

from identity_admin import _utils

if typing.TYPE_CHECKING:
    from urllib3.util import retry
else:
    from requests.packages.urllib3.util import retry # pylint: disable=import-error

logger = logging.getLogger(__name__)

Json = typing.Dict[str, typing.Any]

# Default retry configuration: Retries once on low-level connection and socket read errors.
# Retries up to 4 times on HTTP 500 and 503 errors, with exponential backoff. Returns the
# last response upon exhausting all retries.
DEFAULT_RETRY_CONFIG = retry.Retry(
    connect=1, read=1, status=4, status_forcelist=[500, 503],
    raise_on_status=False, backoff_factor=0.5, allowed_methods=None)

# Number of times the async transport retries a failed connection attempt.
DEFAULT_HTTPX_CONNECT_RETRIES = 1

DEFAULT_TIMEOUT_SECONDS = 120

METRICS_HEADERS = {
    'x-goog-api-client': _utils.get_metrics_header(),
}


class HttpClient:
    """Base HTTP client used to make blocking HTTP calls.

    HttpClient maintains an HTTP session, and handles request authentication and retries if
    necessary.
    """

    def __init__(
        self,
        credential: typing.Optional[google.auth.credentials.Credentials] = None,
        retries: retry.Retry = DEFAULT_RETRY_CONFIG,
        timeout: typing.Optional[int] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Creates a new HttpClient instance from the provided arguments.

        If a credential is provided, initializes a new HTTP session authorized with it. Otherwise
        initializes a new unauthorized session.

        Args:
          credential: A Google credential that can be used to authenticate requests (optional).
          retries: A urllib retry configuration. Default settings would retry once for low-level
              connection and socket read errors, and up to 4 times for HTTP 500 and 503 errors.
              Pass a False value to disable retries (optional).
          timeout: HTTP timeout in seconds. Defaults to 120 seconds when not specified. Set to
              None to disable timeouts (optional).
        """
        self._session: typing.Optional[requests.Session]
        if credential:
            self._session = google.auth.transport.requests.AuthorizedSession(credential)
        else:
            self._session = requests.Session() # pylint: disable=redefined-variable-type

        if retries:
            self._session.mount('http://', requests.adapters.HTTPAdapter(max_retries=retries))
            self._session.mount('https://', requests.adapters.HTTPAdapter(max_retries=retries))
        self._timeout = timeout

    @property
    def session(self) -> typing.Optional[requests.Session]:
        return self._session

    @property
    def timeout(self) -> typing.Optional[int]:
        return self._timeout

    def parse_body(self, resp: requests.Response) -> typing.Any:
        raise NotImplementedError

    def request(self, method: str, url: str, **kwargs: typing.Any) -> requests.Response:
        """Makes an HTTP call using the Python requests library.

        This is the sole entry point to the requests library. All other helper methods in this
        class call this method to send HTTP requests out.

        Args:
          method: HTTP method name as a string (e.g. get, post).
          url: URL of the remote endpoint.
          **kwargs: An additional set of keyword arguments to be passed into the requests API
              (e.g. json, params, timeout).

        Returns:
          Response: An HTTP response object.

        Raises:
          RequestException: Any requests exceptions encountered while making the HTTP call.
        """
        if self._session is None:
            raise ValueError('HTTP client has already been closed.')
        if 'timeout' not in kwargs:
            kwargs['timeout'] = self.timeout
        kwargs.setdefault('headers', {}).update(METRICS_HEADERS)
        logger.debug('Sending %s request to %s', method.upper(), url)
        resp = self._session.request(method, url, **kwargs)
        resp.raise_for_status()
        return resp

    def send(self, request: requests.Request, **kwargs: typing.Any) -> requests.Response:
        """Sends a request that was assembled ahead of time.

        The method, URL, headers and JSON payload are taken from the given (unprepared)
        request object. Session-level headers and credentials are applied as usual.
        """
        kwargs['headers'] = dict(request.headers)
        if request.json is not None:
            kwargs['json'] = request.json
        return self.request(request.method, request.url, **kwargs)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


class JsonHttpClient(HttpClient):
    """An HTTP client that parses response messages as JSON."""

    def parse_body(self, resp: requests.Response) -> Json:
        return resp.json()


class GoogleAuthCredentialFlow(httpx.Auth):
    """Google Auth Credential Auth Flow"""
    def __init__(self, credential: google.auth.credentials.Credentials) -> None:
        self._credential = credential
        self._max_refresh_attempts = 2
        self._refresh_status_codes = (401,)

    def apply_auth_headers(
        self,
        request: httpx.Request,
        auth_request: google.auth.transport.requests.Request,
    ) -> None:
        """Refreshes the credential if needed, and writes the access token and any other Google
        Auth headers into the request."""
        logger.debug(
            'Applying auth headers. Credential validity before: %s', self._credential.valid)
        self._credential.before_request(
            auth_request, request.method, str(request.url), request.headers)
        logger.debug('Auth headers applied. Credential validity after: %s', self._credential.valid)

    def auth_flow(
        self, request: httpx.Request,
    ) -> typing.Generator[httpx.Request, httpx.Response, None]:
        original_headers = request.headers.copy()
        refresh_attempt = 0

        # Used by google-auth to refresh the credential.
        auth_request = google.auth.transport.requests.Request()

        while True:
            request.headers = original_headers.copy()
            self.apply_auth_headers(request, auth_request)

            response: httpx.Response = yield request

            if response.status_code not in self._refresh_status_codes:
                break
            if refresh_attempt >= self._max_refresh_attempts:
                logger.debug(
                    'Received status %d, but max auth refresh attempts (%d) reached.',
                    response.status_code, self._max_refresh_attempts)
                break

            logger.debug(
                'Received status %d. Forcing credential refresh, attempt %d of %d.',
                response.status_code, refresh_attempt + 1, self._max_refresh_attempts)
            self._credential.refresh(auth_request)
            refresh_attempt += 1


class HttpxAsyncClient:
    """Async HTTP client used to make HTTP/2 calls using HTTPX.

    HttpxAsyncClient maintains an async HTTPX client, and handles request authentication.
    Awaiting any of its request methods is the only point at which the calling coroutine
    suspends, so cancelling the calling task aborts the exchange in flight.
    """

    def __init__(
        self,
        credential: typing.Optional[google.auth.credentials.Credentials] = None,
        retries: int = DEFAULT_HTTPX_CONNECT_RETRIES,
        timeout: typing.Optional[int] = DEFAULT_TIMEOUT_SECONDS,
        http2: bool = True,
    ) -> None:
        """Creates a new HttpxAsyncClient instance from the provided arguments.

        If a credential is provided, initializes a new async HTTPX client authorized with it.
        Otherwise, initializes a new unauthorized async HTTPX client.

        Args:
            credential: A Google credential that can be used to authenticate requests (optional).
            retries: Number of times a failed connection attempt is retried (optional).
            timeout: HTTP timeout in seconds. Defaults to 120 seconds when not specified (optional).
            http2: A boolean indicating if HTTP/2 support should be enabled. Defaults to `True` when
                not specified (optional).
        """
        self._timeout = timeout
        self._headers = {**METRICS_HEADERS}
        transport = httpx.AsyncHTTPTransport(retries=retries, http2=http2)
        auth = GoogleAuthCredentialFlow(credential) if credential else None
        self._async_client = httpx.AsyncClient(
            http2=http2,
            timeout=self._timeout,
            headers=self._headers,
            auth=auth,
            transport=transport,
        )

    @property
    def timeout(self) -> typing.Optional[int]:
        return self._timeout

    @property
    def async_client(self) -> httpx.AsyncClient:
        return self._async_client

    async def request(self, method: str, url: str, **kwargs: typing.Any) -> httpx.Response:
        """Makes an HTTP call using the HTTPX library.

        This is the sole entry point to the HTTPX library. All other helper methods in this
        class call this method to send HTTP requests out.

        Args:
            method: HTTP method name as a string (e.g. get, post).
            url: URL of the remote endpoint.
            **kwargs: An additional set of keyword arguments to be passed into the HTTPX API
                (e.g. json, params, timeout).

        Returns:
            Response: An HTTPX response object.

        Raises:
            HTTPError: Any HTTPX exceptions encountered while making the HTTP call.
        """
        if 'timeout' not in kwargs:
            kwargs['timeout'] = self.timeout
        logger.debug('Sending %s request to %s', method.upper(), url)
        resp = await self._async_client.request(method, url, **kwargs)
        resp.raise_for_status()
        return resp

    async def send(self, request: requests.Request, **kwargs: typing.Any) -> httpx.Response:
        """Sends a request that was assembled ahead of time (see ``HttpClient.send()``)."""
        kwargs['headers'] = dict(request.headers)
        if request.json is not None:
            kwargs['json'] = request.json
        return await self.request(request.method, request.url, **kwargs)

    def parse_body(self, resp: httpx.Response) -> typing.Any:
        return resp.json()

    async def aclose(self) -> None:
        await self._async_client.aclose()
