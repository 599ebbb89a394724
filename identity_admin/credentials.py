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

"""Credentials used to authorize calls to the Identity Toolkit service.

The SDK never acquires OAuth2 tokens itself. Each credential here hands a
``google.auth.credentials.Credentials`` instance to the HTTP transport, which refreshes it
and attaches it to outgoing requests.
"""
import json
import pathlib
import typing

import google.auth
from google.auth.credentials import Credentials as GoogleAuthCredentials
from google.oauth2 import service_account


_scopes = [
    'https://www.googleapis.com/auth/cloud-platform',
    'https://www.googleapis.com/auth/identitytoolkit',
]


class Base:
    """Provides Google credentials for accessing the Identity Toolkit service."""

    def get_credential(self) -> GoogleAuthCredentials:
        """Returns the Google credential instance used for authentication."""
        raise NotImplementedError

    @property
    def project_id(self) -> typing.Optional[str]:
        return None


class Certificate(Base):
    """A credential initialized from a JSON service account keyfile."""

    _CREDENTIAL_TYPE = 'service_account'

    def __init__(self, cert: typing.Union[str, pathlib.Path, typing.Dict[str, typing.Any]]) -> None:
        """Initializes a credential from a Google service account certificate.

        To instantiate a credential from a certificate file, either specify the file path or a
        dict representing the parsed contents of the file.

        Args:
          cert: Path to a certificate file or a dict representing the contents of a certificate.

        Raises:
          IOError: If the specified certificate file doesn't exist or cannot be read.
          ValueError: If the specified certificate is invalid.
        """
        super().__init__()
        if isinstance(cert, (str, pathlib.Path)):
            with open(cert, encoding='utf-8') as json_file:
                json_data = json.load(json_file)
        elif isinstance(cert, dict):
            json_data = cert
        else:
            raise ValueError(
                'Invalid certificate argument: "{0}". Certificate argument must be a file path, '
                'or a dict containing the parsed file contents.'.format(cert))

        if json_data.get('type') != self._CREDENTIAL_TYPE:
            raise ValueError('Invalid service account certificate. Certificate must contain a '
                             '"type" field set to "{0}".'.format(self._CREDENTIAL_TYPE))
        try:
            self._g_credential = service_account.Credentials.from_service_account_info(
                json_data, scopes=_scopes)
        except ValueError as error:
            raise ValueError('Failed to initialize a certificate credential. '
                             'Caused by: "{0}"'.format(error)) from error

    @property
    def project_id(self) -> typing.Optional[str]:
        return self._g_credential.project_id

    @property
    def service_account_email(self) -> str:
        return self._g_credential.service_account_email

    def get_credential(self) -> GoogleAuthCredentials:
        return self._g_credential


class ApplicationDefault(Base):
    """A Google Application Default credential."""

    def __init__(self) -> None:
        """Creates an instance that will use Application Default credentials.

        The credentials will be lazily initialized when get_credential() or
        project_id() is called. See those methods for possible errors raised.
        """
        super().__init__()
        self._g_credential: typing.Optional[GoogleAuthCredentials] = None
        self._project_id: typing.Optional[str] = None

    def get_credential(self) -> GoogleAuthCredentials:
        """Returns the underlying Google credential.

        Raises:
          google.auth.exceptions.DefaultCredentialsError: If Application Default
              credentials cannot be initialized in the current environment.
        """
        self._load_credential()
        return typing.cast(GoogleAuthCredentials, self._g_credential)

    @property
    def project_id(self) -> typing.Optional[str]:
        """Returns the project ID discovered along with the Application Default credentials.

        Raises:
          google.auth.exceptions.DefaultCredentialsError: If Application Default
              credentials cannot be initialized in the current environment.
        """
        self._load_credential()
        return self._project_id

    def _load_credential(self) -> None:
        if not self._g_credential:
            self._g_credential, self._project_id = google.auth.default(scopes=_scopes)


class _ExternalCredentials(Base):
    """Wraps an existing ``google.auth.credentials.Credentials`` instance."""

    def __init__(self, credential: GoogleAuthCredentials) -> None:
        super().__init__()
        self._g_credential = credential

    def get_credential(self) -> GoogleAuthCredentials:
        return self._g_credential


def from_google_credential(credential: GoogleAuthCredentials) -> Base:
    """Returns a credential that delegates to an already initialized Google credential."""
    if not isinstance(credential, GoogleAuthCredentials):
        raise ValueError(
            'Invalid credential: {0}. Must be a google.auth Credentials instance.'.format(
                credential))
    return _ExternalCredentials(credential)
