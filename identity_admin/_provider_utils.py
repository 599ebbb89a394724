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

"""Provider configuration utils."""

import os
from typing import Any, Dict, List, Optional, Tuple
from urllib import parse

import httpx
import requests

from identity_admin import exceptions
from identity_admin import _utils


EMULATOR_HOST_ENV_VAR = 'FIREBASE_AUTH_EMULATOR_HOST'
MAX_LIST_CONFIGS_RESULTS = 100


class Sentinel:

    def __init__(self, description):
        self.description = description


DELETE_ATTRIBUTE = Sentinel('Value used to delete an attribute from a provider config')


class UnsupportedOperationError(NotImplementedError):
    """The requested operation is not available for this kind of provider config."""


class PageIterator:
    """An iterator that allows iterating over a sequence of items, one at a time.

    This implementation loads a page of items into memory, and iterates on them. When the whole
    page has been traversed, it loads another page. This class never keeps more than one page
    of entries in memory.
    """

    def __init__(self, current_page):
        if not current_page:
            raise ValueError('Current page must not be None.')
        self._current_page = current_page
        self._iter = None

    def __next__(self):
        if self._iter is None:
            self._iter = iter(self.items)

        while True:
            try:
                return next(self._iter)
            except StopIteration:
                if not self._current_page.has_next_page:
                    raise
                self._current_page = self._current_page.get_next_page()
                self._iter = iter(self.items)

    def __iter__(self):
        return self

    @property
    def items(self):
        raise NotImplementedError


class PagesIterator:
    """An iterator over whole pages, starting with the given page.

    Each page after the first one is fetched only when it is requested.
    """

    def __init__(self, first_page):
        if not first_page:
            raise ValueError('First page must not be None.')
        self._first_page = first_page
        self._current_page = None

    def __next__(self):
        if self._current_page is None:
            self._current_page = self._first_page
        elif self._current_page.has_next_page:
            self._current_page = self._current_page.get_next_page()
        else:
            raise StopIteration
        return self._current_page

    def __iter__(self):
        return self


def get_emulator_host() -> str:
    emulator_host = os.getenv(EMULATOR_HOST_ENV_VAR, '')
    if emulator_host and '//' in emulator_host:
        raise ValueError(
            f'Invalid {EMULATOR_HOST_ENV_VAR}: "{emulator_host}". '
            'It must follow format "host:port".')
    return emulator_host


def validate_string(value: Any, label: str) -> str:
    """Validates that the given value is a string."""
    if not isinstance(value, str):
        raise ValueError(f'Invalid type for {label}: {value}.')
    return value


def validate_boolean(value: Any, label: str) -> bool:
    """Validates that the given value is a boolean."""
    if not isinstance(value, bool):
        raise ValueError(f'Invalid type for {label}: {value}.')
    return value


def validate_non_empty_string(value: Any, label: str) -> str:
    """Validates that the given value is a non-empty string."""
    if not isinstance(value, str):
        raise ValueError(f'Invalid type for {label}: {value}.')
    if not value:
        raise ValueError(f'{label} must not be empty.')
    return value


def validate_url(url: Any, label: str) -> str:
    """Validates that the given value is a well-formed, absolute URL string."""
    if not isinstance(url, str) or not url:
        raise ValueError(f'Invalid {label}: "{url}". {label} must be a non-empty string.')
    try:
        parsed = parse.urlparse(url)
    except ValueError as err:
        raise ValueError(f'Malformed {label}: "{url}".') from err
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f'Malformed {label}: "{url}".')
    return url


def validate_page_token(page_token: Any) -> Optional[str]:
    if page_token is None:
        return None
    if not isinstance(page_token, str) or not page_token:
        raise ValueError('Page token must be a non-empty string.')
    return page_token


def validate_max_results(max_results: Any) -> int:
    # bool is a subclass of int, and is never a meaningful page size.
    if not isinstance(max_results, int) or isinstance(max_results, bool):
        raise ValueError('Max results must be an integer.')
    if max_results < 1 or max_results > MAX_LIST_CONFIGS_RESULTS:
        raise ValueError(
            'Max results must be a positive integer less than or equal to '
            f'{MAX_LIST_CONFIGS_RESULTS}.')
    return max_results


def build_update_mask(params: Dict[str, Any]) -> List[str]:
    """Creates an update mask list from the given dictionary.

    Nested dictionaries contribute dotted paths (``parent.child``). Every other value, including
    ``None`` and lists, is a leaf. The result is sorted.
    """
    mask: List[str] = []
    for key, value in params.items():
        if isinstance(value, dict):
            for child in build_update_mask(value):
                mask.append(f'{key}.{child}')
        else:
            mask.append(key)

    return sorted(mask)


class ConfigurationNotFoundError(exceptions.NotFoundError):
    """No identity provider configuration found for the specified identifier."""

    default_message = 'No identity provider configuration found for the given identifier'


class EmailAlreadyExistsError(exceptions.AlreadyExistsError):
    """The user with the provided email already exists."""

    default_message = 'The user with the provided email already exists'


class InsufficientPermissionError(exceptions.PermissionDeniedError):
    """The credential used to initialize the SDK lacks required permissions."""

    default_message = ('The credential used to initialize the SDK has insufficient '
                       'permissions to perform the requested operation')


class TenantNotFoundError(exceptions.NotFoundError):
    """No tenant found for the specified identifier."""

    default_message = 'No tenant found for the given identifier'


class TooManyAttemptsTryLaterError(exceptions.ResourceExhaustedError):
    """Rate limited because of too many attempts."""


class UnexpectedResponseError(exceptions.UnknownError):
    """Backend service responded with an unexpected or malformed response."""


def parse_response_body(http_client, response) -> Dict[str, Any]:
    """Deserializes a successful response, which must carry a JSON object.

    Raises:
        UnexpectedResponseError: If the response body is not a JSON object.
    """
    try:
        body = http_client.parse_body(response)
    except ValueError as error:
        raise UnexpectedResponseError(
            'Failed to parse the response from the Identity Toolkit service.',
            cause=error, http_response=response)
    if not isinstance(body, dict):
        raise UnexpectedResponseError(
            f'Unexpected response from the Identity Toolkit service: {body}.',
            http_response=response)
    return body


_CODE_TO_EXC_TYPE = {
    'CONFIGURATION_NOT_FOUND': ConfigurationNotFoundError,
    'DUPLICATE_EMAIL': EmailAlreadyExistsError,
    'EMAIL_EXISTS': EmailAlreadyExistsError,
    'INSUFFICIENT_PERMISSION': InsufficientPermissionError,
    'TENANT_NOT_FOUND': TenantNotFoundError,
    'TOO_MANY_ATTEMPTS_TRY_LATER': TooManyAttemptsTryLaterError,
}


def handle_backend_error(error: requests.RequestException) -> exceptions.IdentityToolkitError:
    """Converts a requests error received from the Identity Toolkit service."""
    if error.response is None:
        return _utils.handle_requests_error(error)

    exc, msg, status = _interpret_error_response(error, error.response)
    if exc:
        return exc
    return _utils.handle_requests_error(error, message=msg, code=status)


def handle_backend_error_httpx(error: httpx.HTTPError) -> exceptions.IdentityToolkitError:
    """Converts an httpx error received from the Identity Toolkit service."""
    if not isinstance(error, httpx.HTTPStatusError):
        return _utils.handle_httpx_error(error)

    exc, msg, status = _interpret_error_response(error, error.response)
    if exc:
        return exc
    return _utils.handle_httpx_error(error, message=msg, code=status)


def _interpret_error_response(error, response):
    """Extracts the Auth error code from an error response.

    Returns a tuple of (fine-grained error or None, message, platform status code or None).
    """
    error_dict = _parse_error_body(response)
    code, custom_message = _split_error_message(error_dict.get('message'))
    status = error_dict.get('status')
    if not code:
        return None, f'Unexpected error response: {response.content.decode()}', status

    exc_type = _CODE_TO_EXC_TYPE.get(code)
    msg = _build_error_message(code, exc_type, custom_message)
    if not exc_type:
        return None, msg, status
    return exc_type(msg, cause=error, http_response=response), msg, status


def _parse_error_body(response) -> Dict[str, Any]:
    try:
        parsed_body = response.json()
    except ValueError:
        return {}
    if not isinstance(parsed_body, dict):
        return {}
    error_dict = parsed_body.get('error', {})
    return error_dict if isinstance(error_dict, dict) else {}


def _split_error_message(message: Any) -> Tuple[Optional[str], Optional[str]]:
    # Auth error response format: {"error": {"message": "AUTH_ERROR_CODE: Optional text"}}
    if not message or not isinstance(message, str):
        return None, None
    separator = message.find(':')
    if separator == -1:
        return message.strip(), None
    return message[:separator].strip(), message[separator + 1:].strip()


def _build_error_message(code, exc_type, custom_message) -> str:
    default_message = getattr(
        exc_type, 'default_message', 'Error while calling the Identity Toolkit service')
    ext = f' {custom_message}' if custom_message else ''
    return f'{default_message} ({code}).{ext}'
