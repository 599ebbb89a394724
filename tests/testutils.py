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

"""Common utility classes and functions for testing."""
import io
import os

from google.auth import credentials
from requests import adapters
from requests import models

import identity_admin


def resource_filename(filename):
    """Returns the absolute path to a test resource."""
    return os.path.join(os.path.dirname(__file__), 'data', filename)


def resource(filename):
    """Returns the contents of a test resource."""
    with open(resource_filename(filename), 'r', encoding='utf-8') as file_obj:
        return file_obj.read()


def cleanup_apps():
    with identity_admin._apps_lock:
        apps = list(identity_admin._apps.values())
        for app in apps:
            identity_admin.delete_app(app)


# Temporarily disable the lint rule. For more information see:
# https://github.com/googleapis/google-auth-library-python/pull/561
# pylint: disable=abstract-method
class MockGoogleCredential(credentials.Credentials):
    """A mock Google authentication credential."""

    def __init__(self):
        super().__init__()
        self.token = None
        self._token_state = credentials.TokenState.INVALID

    def refresh(self, request):
        self.token = 'mock-token'
        self._token_state = credentials.TokenState.FRESH

    @property
    def token_state(self):
        return self._token_state


class MockCredential(identity_admin.credentials.Base):
    """A mock credential implementation."""

    def __init__(self, project_id=None):
        self._g_credential = MockGoogleCredential()
        self._project_id = project_id

    def get_credential(self):
        return self._g_credential

    @property
    def project_id(self):
        return self._project_id


class MockMultiRequestAdapter(adapters.HTTPAdapter):
    """A mock HTTP adapter that supports multiple responses for the Python requests module."""
    def __init__(self, responses, statuses, recorder):
        """Constructs a MockMultiRequestAdapter.

        The lengths of the responses and statuses parameters must match.

        Each incoming request consumes a response and a status, in order. If all responses and
        statuses are exhausted, further requests will reuse the last response and status.
        """
        adapters.HTTPAdapter.__init__(self)
        if len(responses) != len(statuses):
            raise ValueError('The lengths of responses and statuses do not match.')
        self._current_response = 0
        self._responses = list(responses)  # Make a copy.
        self._statuses = list(statuses)
        self._recorder = recorder

    def send(self, request, **kwargs): # pylint: disable=arguments-differ
        request._extra_kwargs = kwargs
        self._recorder.append(request)
        resp = models.Response()
        resp.url = request.url
        resp.status_code = self._statuses[self._current_response]
        resp.raw = io.BytesIO(self._responses[self._current_response].encode())
        self._current_response = min(self._current_response + 1, len(self._responses) - 1)
        return resp


class MockAdapter(MockMultiRequestAdapter):
    """A mock HTTP adapter for the Python requests module."""
    def __init__(self, data, status, recorder):
        super().__init__([data], [status], recorder)

    @property
    def status(self):
        return self._statuses[0]

    @property
    def data(self):
        return self._responses[0]


class MockFailingAdapter(adapters.HTTPAdapter):
    """A mock HTTP adapter that raises the given error for every request."""
    def __init__(self, error, recorder):
        adapters.HTTPAdapter.__init__(self)
        self._error = error
        self._recorder = recorder

    def send(self, request, **kwargs): # pylint: disable=arguments-differ
        self._recorder.append(request)
        raise self._error
