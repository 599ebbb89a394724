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

"""Builds requests addressed to the project-scoped Identity Toolkit REST API."""

from urllib import parse

import requests
import requests.structures

from identity_admin import _utils


CLIENT_VERSION_HEADER = 'X-Client-Version'


class RequestBuilder:
    """Assembles unsent requests against a fixed base URL.

    Building a request performs no I/O. The returned ``requests.Request`` objects can be handed
    to either the blocking or the async HTTP client.
    """

    def __init__(self, base_url, client_version=None):
        self._base_url = base_url.rstrip('/')
        self._client_version = client_version or _utils.get_client_version()

    @property
    def base_url(self):
        return self._base_url

    @property
    def client_version(self):
        return self._client_version

    def build(self, method, path, body=None, query=None):
        """Creates a new request.

        Args:
            method: HTTP method name (e.g. get, patch).
            path: A path relative to the base URL, or an absolute URL.
            body: A JSON-serializable payload (optional).
            query: A mapping of query parameters (optional). Parameters are emitted in the
                iteration order of the mapping.

        Returns:
            requests.Request: An unprepared request carrying the client version header.
        """
        url = '{0}{1}'.format(self.resolve(path), encode_query(query))
        request = requests.Request(
            method=method.upper(), url=url,
            headers=requests.structures.CaseInsensitiveDict(), json=body)
        return self.add_client_version(request)

    def resolve(self, path):
        if parse.urlparse(path).scheme:
            return path
        return '{0}/{1}'.format(self._base_url, path.lstrip('/'))

    def add_client_version(self, request):
        """Adds the client version header to the request unless it is already present."""
        if not isinstance(request.headers, requests.structures.CaseInsensitiveDict):
            request.headers = requests.structures.CaseInsensitiveDict(request.headers or {})
        if CLIENT_VERSION_HEADER not in request.headers:
            request.headers[CLIENT_VERSION_HEADER] = self._client_version
        return request


def encode_query(query):
    """Renders a query string (including the leading ``?``) from the given mapping.

    Values are percent-encoded. Commas are left as-is so that field masks stay readable.
    """
    if not query:
        return ''
    pairs = ['{0}={1}'.format(key, parse.quote(str(value), safe=','))
             for key, value in query.items()]
    return '?' + '&'.join(pairs)
