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

"""Identity Admin SDK for Python."""
import json
import logging
import os
import threading

from google.auth.exceptions import DefaultCredentialsError
from identity_admin import credentials
from identity_admin.__about__ import __version__


logger = logging.getLogger(__name__)

_apps = {}
_apps_lock = threading.RLock()

_DEFAULT_APP_NAME = '[DEFAULT]'
_CONFIG_ENV_VAR = 'IDENTITY_ADMIN_CONFIG'
_CONFIG_VALID_KEYS = ['httpTimeout', 'projectId']


def initialize_app(credential=None, options=None, name=_DEFAULT_APP_NAME):
    """Initializes and returns a new App instance.

    If options are not provided an attempt is made to load them from the
    ``IDENTITY_ADMIN_CONFIG`` environment variable. A value starting with ``"{"`` is parsed as a
    JSON object. Any other value is treated as the path of a JSON file.

    Args:
      credential: A credential object used to initialize the SDK (optional). If none is provided,
          Google Application Default Credentials are used.
      options: A dictionary of configuration options (optional). Supported options are
          ``projectId`` and ``httpTimeout``. If ``httpTimeout`` is not set, the SDK uses
          a default timeout of 120 seconds.
      name: Name of the app (optional).

    Returns:
      App: A newly initialized instance of App.

    Raises:
      ValueError: If the app name is already in use, or any of the
          provided arguments are invalid.
    """
    if credential is None:
        credential = credentials.ApplicationDefault()
    app = App(name, credential, options)
    with _apps_lock:
        if app.name not in _apps:
            _apps[app.name] = app
            logger.debug('Initialized app "%s"', app.name)
            return app

    if name == _DEFAULT_APP_NAME:
        raise ValueError(
            'The default app already exists. This means you called initialize_app() more '
            'than once without providing an app name. Pass a unique name to initialize '
            'additional apps.')

    raise ValueError(
        'App named "{0}" already exists. Make sure you provide a unique name every time '
        'you call initialize_app().'.format(name))


def delete_app(app):
    """Gracefully deletes an App instance, closing any clients created for it.

    Raises:
      ValueError: If the app is not initialized.
    """
    if not isinstance(app, App):
        raise ValueError('Illegal app argument type: "{}". Argument must be of '
                         'type App.'.format(type(app)))
    with _apps_lock:
        if _apps.get(app.name) is app:
            del _apps[app.name]
            app._cleanup() # pylint: disable=protected-access
            return

    raise ValueError(
        'App named "{0}" is not initialized. Make sure to initialize the app by calling '
        'initialize_app().'.format(app.name))


def get_app(name=_DEFAULT_APP_NAME):
    """Retrieves an App instance by name.

    Raises:
      ValueError: If the specified name is not a string, or if the specified
          app does not exist.
    """
    if not isinstance(name, str):
        raise ValueError('Illegal app name argument type: "{}". App name '
                         'must be a string.'.format(type(name)))
    with _apps_lock:
        if name in _apps:
            return _apps[name]

    if name == _DEFAULT_APP_NAME:
        raise ValueError(
            'The default app does not exist. Make sure to initialize '
            'the SDK by calling initialize_app().')

    raise ValueError(
        'App named "{0}" does not exist. Make sure to initialize the SDK by calling '
        'initialize_app() with your app name.'.format(name))


class _AppOptions:
    """A collection of configuration options for an App."""

    def __init__(self, options):
        if options is None:
            options = self._load_from_environment()

        if not isinstance(options, dict):
            raise ValueError('Illegal app options type: {0}. Options '
                             'must be a dictionary.'.format(type(options)))
        self._options = options

    def get(self, key, default=None):
        """Returns the option identified by the provided key."""
        return self._options.get(key, default)

    def _load_from_environment(self):
        config_file = os.getenv(_CONFIG_ENV_VAR)
        if not config_file:
            return {}
        if config_file.startswith('{'):
            json_str = config_file
        else:
            try:
                with open(config_file, 'r', encoding='utf-8') as json_file:
                    json_str = json_file.read()
            except OSError as err:
                raise ValueError('Unable to read file {}. {}'.format(config_file, err)) from err
        try:
            json_data = json.loads(json_str)
        except ValueError as err:
            raise ValueError(
                'JSON string "{0}" is not valid json. {1}'.format(json_str, err)) from err
        if not isinstance(json_data, dict):
            raise ValueError('JSON string "{0}" is not a JSON object.'.format(json_str))
        return {k: v for k, v in json_data.items() if k in _CONFIG_VALID_KEYS}


class App:
    """The entry point for the Identity Admin SDK.

    Holds the credential and options shared by all clients created for it.
    """

    def __init__(self, name, credential, options):
        if not name or not isinstance(name, str):
            raise ValueError('Illegal app name "{0}" provided. App name must be a '
                             'non-empty string.'.format(name))
        self._name = name

        if not isinstance(credential, credentials.Base):
            raise ValueError('Illegal credential provided. App must be initialized '
                             'with a valid credential instance.')
        self._credential = credential
        self._options = _AppOptions(options)
        self._lock = threading.RLock()
        self._services = {}

        App._validate_project_id(self._options.get('projectId'))
        self._project_id_initialized = False

    @classmethod
    def _validate_project_id(cls, project_id):
        if project_id is not None and not isinstance(project_id, str):
            raise ValueError(
                'Invalid project ID: "{0}". project ID must be a string.'.format(project_id))

    @property
    def name(self):
        return self._name

    @property
    def credential(self):
        return self._credential

    @property
    def options(self):
        return self._options

    @property
    def project_id(self):
        if not self._project_id_initialized:
            self._project_id = self._lookup_project_id()
            self._project_id_initialized = True
        return self._project_id

    def _lookup_project_id(self):
        """Looks up the project ID associated with an App.

        The ``projectId`` option wins. Then the credential is consulted, followed by the
        ``GOOGLE_CLOUD_PROJECT`` and ``GCLOUD_PROJECT`` environment variables.

        Returns:
            str: A project ID string or None.
        """
        project_id = self._options.get('projectId')
        if not project_id:
            try:
                project_id = self._credential.project_id
            except (AttributeError, DefaultCredentialsError):
                pass
        if not project_id:
            project_id = os.environ.get('GOOGLE_CLOUD_PROJECT',
                                        os.environ.get('GCLOUD_PROJECT'))
        return project_id

    def _get_service(self, name, initializer):
        """Returns the service instance identified by the given name.

        Each service instance is associated with exactly one App. If the named service does not
        exist yet, the initializer is called to create it, and the result is cached.

        Raises:
          ValueError: If the provided name is invalid, or if the App is already deleted.
        """
        if not name or not isinstance(name, str):
            raise ValueError(
                'Illegal name argument: "{0}". Name must be a non-empty string.'.format(name))
        with self._lock:
            if self._services is None:
                raise ValueError(
                    'Service requested from deleted app: "{0}".'.format(self._name))
            if name not in self._services:
                self._services[name] = initializer(self)
            return self._services[name]

    def _cleanup(self):
        """Closes every service of this App that exposes a close() method."""
        with self._lock:
            for service in self._services.values():
                if callable(getattr(service, 'close', None)):
                    service.close()
            self._services = None
