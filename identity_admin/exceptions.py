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

"""Identity Admin exceptions module.

This module defines the base exception type raised for failed calls to the Identity Toolkit
service, along with the platform-wide error codes outlined in
https://cloud.google.com/apis/design/errors.

:class:`IdentityToolkitError` carries the ``code``, ``http_response`` and ``cause`` properties
common to all remote failures. Argument errors detected before a request is sent are not
reported through this hierarchy. They surface as ``ValueError`` instead, and never reach the
network.

Callers that need fine-grained handling can catch specific subtypes (for example
``ConfigurationNotFoundError`` from :mod:`identity_admin.provider_configs`). It is always a good
idea to keep a handler for ``IdentityToolkitError`` after the subtype handlers, since rare
conditions like connection timeouts are reported as instances of it too.
"""


#: Error code for ``InvalidArgumentError`` type.
INVALID_ARGUMENT = 'INVALID_ARGUMENT'

#: Error code for ``FailedPreconditionError`` type.
FAILED_PRECONDITION = 'FAILED_PRECONDITION'

#: Error code for ``UnauthenticatedError`` type.
UNAUTHENTICATED = 'UNAUTHENTICATED'

#: Error code for ``PermissionDeniedError`` type.
PERMISSION_DENIED = 'PERMISSION_DENIED'

#: Error code for ``NotFoundError`` type.
NOT_FOUND = 'NOT_FOUND'

#: Error code for ``AlreadyExistsError`` type.
ALREADY_EXISTS = 'ALREADY_EXISTS'

#: Error code for ``ResourceExhaustedError`` type.
RESOURCE_EXHAUSTED = 'RESOURCE_EXHAUSTED'

#: Error code for ``CancelledError`` type.
CANCELLED = 'CANCELLED'

#: Error code for ``UnknownError`` type.
UNKNOWN = 'UNKNOWN'

#: Error code for ``InternalError`` type.
INTERNAL = 'INTERNAL'

#: Error code for ``UnavailableError`` type.
UNAVAILABLE = 'UNAVAILABLE'

#: Error code for ``DeadlineExceededError`` type.
DEADLINE_EXCEEDED = 'DEADLINE_EXCEEDED'


class IdentityToolkitError(Exception):
    """Base class for all errors raised while calling the Identity Toolkit service.

    Args:
        code: A string error code that represents the type of the exception. Possible error
            codes are defined in https://cloud.google.com/apis/design/errors#handling_errors.
        message: A human-readable error message string.
        cause: The exception that caused this error (optional).
        http_response: If this error was caused by an HTTP error response, this property is
            set to the response object (``requests.Response`` or ``httpx.Response``) that
            represents the HTTP response (optional).
    """

    def __init__(self, code, message, cause=None, http_response=None):
        Exception.__init__(self, message)
        self._code = code
        self._cause = cause
        self._http_response = http_response

    @property
    def code(self):
        return self._code

    @property
    def cause(self):
        return self._cause

    @property
    def http_response(self):
        return self._http_response


class InvalidArgumentError(IdentityToolkitError):
    """The service rejected an argument in the request."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, INVALID_ARGUMENT, message, cause, http_response)


class FailedPreconditionError(IdentityToolkitError):
    """Request can not be executed in the current state of the project."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, FAILED_PRECONDITION, message, cause, http_response)


class UnauthenticatedError(IdentityToolkitError):
    """Request not authenticated due to missing, invalid, or expired OAuth token."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, UNAUTHENTICATED, message, cause, http_response)


class PermissionDeniedError(IdentityToolkitError):
    """Client does not have sufficient permission.

    This can happen because the OAuth token does not have the right scopes, the client doesn't
    have permission, or the Identity Toolkit API has not been enabled for the project.
    """

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, PERMISSION_DENIED, message, cause, http_response)


class NotFoundError(IdentityToolkitError):
    """A specified resource is not found."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, NOT_FOUND, message, cause, http_response)


class AlreadyExistsError(IdentityToolkitError):
    """The resource that a client tried to create already exists."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, ALREADY_EXISTS, message, cause, http_response)


class ResourceExhaustedError(IdentityToolkitError):
    """Either out of resource quota or reaching rate limiting."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, RESOURCE_EXHAUSTED, message, cause, http_response)


class CancelledError(IdentityToolkitError):
    """Request cancelled by the client."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, CANCELLED, message, cause, http_response)


class UnknownError(IdentityToolkitError):
    """Unknown server error, or a response that could not be interpreted."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, UNKNOWN, message, cause, http_response)


class InternalError(IdentityToolkitError):
    """Internal server error."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, INTERNAL, message, cause, http_response)


class UnavailableError(IdentityToolkitError):
    """Service unavailable. Typically the server is down."""

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, UNAVAILABLE, message, cause, http_response)


class DeadlineExceededError(IdentityToolkitError):
    """Request deadline exceeded.

    Raised when the configured HTTP timeout elapses before the service responds.
    """

    def __init__(self, message, cause=None, http_response=None):
        IdentityToolkitError.__init__(self, DEADLINE_EXCEEDED, message, cause, http_response)
