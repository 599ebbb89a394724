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

"""Internal utilities common to all modules."""

from platform import python_version

import google.auth.credentials
import httpx
import requests

import identity_admin
from identity_admin import exceptions


_ERROR_CODE_TO_EXCEPTION_TYPE = {
    exceptions.INVALID_ARGUMENT: exceptions.InvalidArgumentError,
    exceptions.FAILED_PRECONDITION: exceptions.FailedPreconditionError,
    exceptions.UNAUTHENTICATED: exceptions.UnauthenticatedError,
    exceptions.PERMISSION_DENIED: exceptions.PermissionDeniedError,
    exceptions.NOT_FOUND: exceptions.NotFoundError,
    exceptions.ALREADY_EXISTS: exceptions.AlreadyExistsError,
    exceptions.RESOURCE_EXHAUSTED: exceptions.ResourceExhaustedError,
    exceptions.CANCELLED: exceptions.CancelledError,
    exceptions.UNKNOWN: exceptions.UnknownError,
    exceptions.INTERNAL: exceptions.InternalError,
    exceptions.UNAVAILABLE: exceptions.UnavailableError,
    exceptions.DEADLINE_EXCEEDED: exceptions.DeadlineExceededError,
}


_HTTP_STATUS_TO_ERROR_CODE = {
    400: exceptions.INVALID_ARGUMENT,
    401: exceptions.UNAUTHENTICATED,
    403: exceptions.PERMISSION_DENIED,
    404: exceptions.NOT_FOUND,
    409: exceptions.ALREADY_EXISTS,
    412: exceptions.FAILED_PRECONDITION,
    429: exceptions.RESOURCE_EXHAUSTED,
    500: exceptions.INTERNAL,
    503: exceptions.UNAVAILABLE,
}


def get_client_version():
    """Returns the value sent in the ``X-Client-Version`` header of every request."""
    return 'Python/Admin/{0}'.format(identity_admin.__version__)


def get_metrics_header():
    return f'gl-python/{python_version()} identity-admin/{identity_admin.__version__}'


def _get_initialized_app(app):
    """Returns a reference to an initialized App instance."""
    if app is None:
        return identity_admin.get_app()

    if isinstance(app, identity_admin.App):
        initialized_app = identity_admin.get_app(app.name)
        if app is not initialized_app:
            raise ValueError('Illegal app argument. App instance not '
                             'initialized via the identity_admin module.')
        return app

    raise ValueError('Illegal app argument. Argument must be of type '
                     ' identity_admin.App, but given "{0}".'.format(type(app)))


def get_app_service(app, name, initializer):
    app = _get_initialized_app(app)
    return app._get_service(name, initializer) # pylint: disable=protected-access


def handle_requests_error(error, message=None, code=None):
    """Constructs an ``IdentityToolkitError`` from the given requests error.

    This method does not attempt to parse the error response in any way. Callers that
    understand the service's error format should extract ``message`` and ``code`` themselves.

    Args:
        error: An error raised by the requests module while making an HTTP call.
        message: A message to be included in the resulting error (optional). If not
            specified the string representation of the ``error`` argument is used as the message.
        code: A platform error code that will be used to determine the resulting error type
            (optional). If not specified the HTTP status code on the error response is used to
            determine a suitable error code.

    Returns:
        IdentityToolkitError: An error that can be raised to the user code.
    """
    if isinstance(error, requests.exceptions.Timeout):
        return exceptions.DeadlineExceededError(
            message='Timed out while making an API call: {0}'.format(error),
            cause=error)
    if isinstance(error, requests.exceptions.ConnectionError):
        return exceptions.UnavailableError(
            message='Failed to establish a connection: {0}'.format(error),
            cause=error)
    if error.response is None:
        return exceptions.UnknownError(
            message='Unknown error while making a remote service call: {0}'.format(error),
            cause=error)

    return _error_from_response(error, error.response, message, code)


def handle_httpx_error(error, message=None, code=None):
    """Constructs an ``IdentityToolkitError`` from the given httpx error.

    Counterpart of :func:`handle_requests_error` for the async transport.

    Args:
        error: An error raised by the httpx module while making an HTTP call.
        message: A message to be included in the resulting error (optional).
        code: A platform error code that will be used to determine the resulting error type
            (optional).

    Returns:
        IdentityToolkitError: An error that can be raised to the user code.
    """
    if isinstance(error, httpx.TimeoutException):
        return exceptions.DeadlineExceededError(
            message='Timed out while making an API call: {0}'.format(error),
            cause=error)
    if isinstance(error, httpx.ConnectError):
        return exceptions.UnavailableError(
            message='Failed to establish a connection: {0}'.format(error),
            cause=error)
    if isinstance(error, httpx.HTTPStatusError):
        return _error_from_response(error, error.response, message, code)

    return exceptions.UnknownError(
        message='Unknown error while making a remote service call: {0}'.format(error),
        cause=error)


def _error_from_response(error, response, message, code):
    if not code:
        code = _http_status_to_error_code(response.status_code)
    if not message:
        message = str(error)

    err_type = _error_code_to_exception_type(code)
    return err_type(message=message, cause=error, http_response=response)


def _http_status_to_error_code(status):
    """Maps an HTTP status to a platform error code."""
    return _HTTP_STATUS_TO_ERROR_CODE.get(status, exceptions.UNKNOWN)


def _error_code_to_exception_type(code):
    """Maps a platform error code to an exception type."""
    return _ERROR_CODE_TO_EXCEPTION_TYPE.get(code, exceptions.UnknownError)


# Temporarily disable the lint rule. For more information see:
# https://github.com/googleapis/google-auth-library-python/pull/561
# pylint: disable=abstract-method
class EmulatorAdminCredentials(google.auth.credentials.Credentials):
    """Credentials for use with the Auth emulator.

    This is used instead of user-supplied credentials or ADC. It will silently do nothing when
    asked to refresh credentials.
    """
    def __init__(self):
        google.auth.credentials.Credentials.__init__(self)
        self.token = 'owner'

    def refresh(self, request):
        pass
