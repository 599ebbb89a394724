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

"""Identity provider configuration module.

This module contains functions for retrieving and managing the OIDC and SAML identity
provider configurations of a Google Cloud Identity Platform project, or of one of its tenants.
"""

import logging
import threading

from identity_admin import _http_client
from identity_admin import _provider_mgt
from identity_admin import _provider_utils
from identity_admin import _utils


logger = logging.getLogger(__name__)

_PROVIDER_CONFIGS_ATTRIBUTE = '_provider_configs'


__all__ = [
    'Client',
    'ConfigurationNotFoundError',
    'DELETE_ATTRIBUTE',
    'EmailAlreadyExistsError',
    'InsufficientPermissionError',
    'ListProviderConfigsPage',
    'OIDCProviderConfig',
    'ProviderConfig',
    'SAMLProviderConfig',
    'TenantNotFoundError',
    'TooManyAttemptsTryLaterError',
    'UnexpectedResponseError',
    'UnsupportedOperationError',

    'client_for_tenant',
    'create_oidc_provider_config',
    'create_saml_provider_config',
    'get_oidc_provider_config',
    'get_saml_provider_config',
    'list_oidc_provider_configs',
    'list_saml_provider_configs',
    'update_oidc_provider_config',
    'update_saml_provider_config',
]

ConfigurationNotFoundError = _provider_utils.ConfigurationNotFoundError
DELETE_ATTRIBUTE = _provider_utils.DELETE_ATTRIBUTE
EmailAlreadyExistsError = _provider_utils.EmailAlreadyExistsError
InsufficientPermissionError = _provider_utils.InsufficientPermissionError
ListProviderConfigsPage = _provider_mgt.ListProviderConfigsPage
OIDCProviderConfig = _provider_mgt.OIDCProviderConfig
ProviderConfig = _provider_mgt.ProviderConfig
SAMLProviderConfig = _provider_mgt.SAMLProviderConfig
TenantNotFoundError = _provider_utils.TenantNotFoundError
TooManyAttemptsTryLaterError = _provider_utils.TooManyAttemptsTryLaterError
UnexpectedResponseError = _provider_utils.UnexpectedResponseError
UnsupportedOperationError = _provider_utils.UnsupportedOperationError


def resolve_endpoint(app):
    """Returns the (Google credential, URL override) pair to use for the given App.

    When the ``FIREBASE_AUTH_EMULATOR_HOST`` environment variable is set, requests are
    directed to the emulator and authorized with a fixed owner token.
    """
    emulator_host = _provider_utils.get_emulator_host()
    if emulator_host:
        logger.debug('Using the Auth emulator at %s', emulator_host)
        url_override = 'http://{0}/identitytoolkit.googleapis.com/v2'.format(emulator_host)
        return _utils.EmulatorAdminCredentials(), url_override
    return app.credential.get_credential(), None


def require_project_id(app):
    if not app.project_id:
        raise ValueError("""A project ID is required to manage provider configs.
            1. Use a service account credential, or
            2. set the project ID explicitly via App options, or
            3. set the project ID via the GOOGLE_CLOUD_PROJECT environment variable.""")
    return app.project_id


class Client:
    """Provider config client scoped to a project, and optionally to a tenant."""

    def __init__(self, app, tenant_id=None):
        project_id = require_project_id(app)
        credential, url_override = resolve_endpoint(app)
        timeout = app.options.get('httpTimeout', _http_client.DEFAULT_TIMEOUT_SECONDS)
        self._tenant_id = tenant_id
        self._http_client = _http_client.JsonHttpClient(credential=credential, timeout=timeout)
        self._provider_manager = _provider_mgt.ProviderConfigClient(
            self._http_client, project_id, tenant_id, url_override=url_override)

    @property
    def tenant_id(self):
        """Tenant ID associated with this client."""
        return self._tenant_id

    def get_oidc_provider_config(self, provider_id):
        """Returns the ``OIDCProviderConfig`` with the given ID.

        Args:
            provider_id: Provider ID string.

        Returns:
            OIDCProviderConfig: An OIDC provider config instance.

        Raises:
            ValueError: If the provider ID is invalid, empty or does not have ``oidc.`` prefix.
            ConfigurationNotFoundError: If no OIDC provider is available with the given identifier.
            IdentityToolkitError: If an error occurs while retrieving the OIDC provider.
        """
        return self._provider_manager.get_oidc_provider_config(provider_id)

    def create_oidc_provider_config(
            self, provider_id, client_id, issuer, display_name=None, enabled=None,
            client_secret=None, id_token_response_type=None, code_response_type=None):
        """Creates a new OIDC provider config from the given parameters.

        Args:
            provider_id: Provider ID string. Must have the prefix ``oidc.``.
            client_id: Client ID of the new config.
            issuer: Issuer of the new config. Must be a valid URL.
            display_name: The user-friendly display name to the current configuration (optional).
            enabled: A boolean indicating whether the provider configuration is enabled or
                disabled (optional).
            client_secret: A string which sets the client secret for the new provider. Required
                when the code flow is enabled (optional).
            id_token_response_type: A boolean which sets whether to enable the ID token response
                flow for the new provider (optional).
            code_response_type: A boolean which sets whether to enable the code response flow
                for the new provider (optional).

        Returns:
            OIDCProviderConfig: The newly created OIDC provider config instance.

        Raises:
            ValueError: If any of the specified input parameters are invalid.
            IdentityToolkitError: If an error occurs while creating the new OIDC provider config.
        """
        return self._provider_manager.create_oidc_provider_config(
            provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
            enabled=enabled, client_secret=client_secret,
            id_token_response_type=id_token_response_type,
            code_response_type=code_response_type)

    def update_oidc_provider_config(
            self, provider_id, client_id=None, issuer=None, display_name=None, enabled=None,
            client_secret=None, id_token_response_type=None, code_response_type=None):
        """Updates an existing OIDC provider config with the given parameters.

        Only the specified parameters are sent, and they alone make up the update mask. Pass
        ``DELETE_ATTRIBUTE`` as the display name to clear it.

        Returns:
            OIDCProviderConfig: The updated OIDC provider config instance.

        Raises:
            ValueError: If any of the specified input parameters are invalid, or none is given.
            IdentityToolkitError: If an error occurs while updating the OIDC provider config.
        """
        return self._provider_manager.update_oidc_provider_config(
            provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
            enabled=enabled, client_secret=client_secret,
            id_token_response_type=id_token_response_type,
            code_response_type=code_response_type)

    def list_oidc_provider_configs(
            self, page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS):
        """Retrieves a page of OIDC provider configs from the current project.

        The ``page_token`` argument governs the starting point of the page. The ``max_results``
        argument governs the maximum number of configs that may be included in the returned
        page. This function never returns None. If there are no OIDC configs in the project,
        this returns an empty page.

        Args:
            page_token: A non-empty page token string, which indicates the starting point of the
                page (optional). Defaults to ``None``, which will retrieve the first page.
            max_results: A positive integer indicating the maximum number of configs to include
                in the returned page (optional). Defaults to 100, which is also the maximum
                number allowed.

        Returns:
            ListProviderConfigsPage: A page of OIDC provider config instances.

        Raises:
            ValueError: If ``max_results`` or ``page_token`` are invalid.
            IdentityToolkitError: If an error occurs while retrieving the OIDC provider configs.
        """
        return self._provider_manager.list_oidc_provider_configs(page_token, max_results)

    def get_saml_provider_config(self, provider_id):
        """Returns the ``SAMLProviderConfig`` with the given ID.

        Raises:
            ValueError: If the provider ID is invalid, empty or does not have ``saml.`` prefix.
            ConfigurationNotFoundError: If no SAML provider is available with the given identifier.
            IdentityToolkitError: If an error occurs while retrieving the SAML provider.
        """
        return self._provider_manager.get_saml_provider_config(provider_id)

    def create_saml_provider_config(self, provider_id, **kwargs):
        """Always raises ``UnsupportedOperationError``. SAML configs are read-only here."""
        return self._provider_manager.create_saml_provider_config(provider_id, **kwargs)

    def update_saml_provider_config(self, provider_id, **kwargs):
        """Always raises ``UnsupportedOperationError``. SAML configs are read-only here."""
        return self._provider_manager.update_saml_provider_config(provider_id, **kwargs)

    def list_saml_provider_configs(
            self, page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS):
        """Always raises ``UnsupportedOperationError``. SAML configs are read-only here."""
        return self._provider_manager.list_saml_provider_configs(page_token, max_results)

    def close(self):
        self._http_client.close()


class _ProviderConfigService:
    """Holds the project-level client of an App, along with its tenant-scoped clients."""

    def __init__(self, app):
        self.app = app
        self.client = Client(app)
        self.tenant_clients = {}
        self.lock = threading.RLock()

    def client_for_tenant(self, tenant_id):
        if not isinstance(tenant_id, str) or not tenant_id:
            raise ValueError(
                f'Invalid tenant ID: {tenant_id}. Tenant ID must be a non-empty string.')

        with self.lock:
            if tenant_id not in self.tenant_clients:
                self.tenant_clients[tenant_id] = Client(self.app, tenant_id=tenant_id)
            return self.tenant_clients[tenant_id]

    def close(self):
        with self.lock:
            for client in self.tenant_clients.values():
                client.close()
            self.tenant_clients = {}
        self.client.close()


def _get_service(app):
    return _utils.get_app_service(app, _PROVIDER_CONFIGS_ATTRIBUTE, _ProviderConfigService)


def _get_client(app):
    """Returns the project-level client of an App, creating it on first use.

    Args:
        app: An App instance (or ``None`` to use the default App).

    Raises:
        ValueError: If the app argument is invalid.
    """
    return _get_service(app).client


def client_for_tenant(tenant_id, app=None):
    """Gets a Client instance scoped to the given tenant ID.

    Clients are cached, so repeated calls with the same tenant ID return the same instance.

    Raises:
        ValueError: If the tenant ID is None, empty or not a string.
    """
    return _get_service(app).client_for_tenant(tenant_id)


def get_oidc_provider_config(provider_id, app=None):
    """Returns the ``OIDCProviderConfig`` with the given ID.

    Args:
        provider_id: Provider ID string.
        app: An App instance (optional).

    Returns:
        OIDCProviderConfig: An OIDC provider config instance.

    Raises:
        ValueError: If the provider ID is invalid, empty or does not have ``oidc.`` prefix.
        ConfigurationNotFoundError: If no OIDC provider is available with the given identifier.
        IdentityToolkitError: If an error occurs while retrieving the OIDC provider.
    """
    client = _get_client(app)
    return client.get_oidc_provider_config(provider_id)


def create_oidc_provider_config(
        provider_id, client_id, issuer, display_name=None, enabled=None, client_secret=None,
        id_token_response_type=None, code_response_type=None, app=None):
    """Creates a new OIDC provider config from the given parameters.

    See ``Client.create_oidc_provider_config()`` for a description of the arguments.

    Returns:
        OIDCProviderConfig: The newly created OIDC provider config instance.
    """
    client = _get_client(app)
    return client.create_oidc_provider_config(
        provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
        enabled=enabled, client_secret=client_secret,
        id_token_response_type=id_token_response_type, code_response_type=code_response_type)


def update_oidc_provider_config(
        provider_id, client_id=None, issuer=None, display_name=None, enabled=None,
        client_secret=None, id_token_response_type=None, code_response_type=None, app=None):
    """Updates an existing OIDC provider config with the given parameters.

    Returns:
        OIDCProviderConfig: The updated OIDC provider config instance.
    """
    client = _get_client(app)
    return client.update_oidc_provider_config(
        provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
        enabled=enabled, client_secret=client_secret,
        id_token_response_type=id_token_response_type, code_response_type=code_response_type)


def list_oidc_provider_configs(
        page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS, app=None):
    """Retrieves a page of OIDC provider configs from the specified project.

    Returns:
        ListProviderConfigsPage: A page of OIDC provider config instances.
    """
    client = _get_client(app)
    return client.list_oidc_provider_configs(page_token, max_results)


def get_saml_provider_config(provider_id, app=None):
    """Returns the ``SAMLProviderConfig`` with the given ID."""
    client = _get_client(app)
    return client.get_saml_provider_config(provider_id)


def create_saml_provider_config(provider_id, app=None, **kwargs):
    """Always raises ``UnsupportedOperationError``, without looking up the App."""
    _provider_mgt.SAML.ensure_supported(_provider_mgt.CREATE)
    client = _get_client(app)
    return client.create_saml_provider_config(provider_id, **kwargs)


def update_saml_provider_config(provider_id, app=None, **kwargs):
    _provider_mgt.SAML.ensure_supported(_provider_mgt.UPDATE)
    client = _get_client(app)
    return client.update_saml_provider_config(provider_id, **kwargs)


def list_saml_provider_configs(
        page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS, app=None):
    _provider_mgt.SAML.ensure_supported(_provider_mgt.LIST)
    client = _get_client(app)
    return client.list_saml_provider_configs(page_token, max_results)
