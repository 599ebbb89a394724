# Copyright 2021 Google Inc.
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

"""Identity provider configuration async module.

Coroutine counterparts of the functions in ``identity_admin.provider_configs``. Cancelling the
task that awaits any of them abandons the HTTP exchange in flight, and nothing further is sent.
"""

from identity_admin import _http_client
from identity_admin import _provider_mgt
from identity_admin import _provider_mgt_async
from identity_admin import _utils
from identity_admin import provider_configs


_PROVIDER_CONFIGS_ATTRIBUTE = '_provider_configs_async'


__all__ = [
    'AsyncClient',
    'AsyncListProviderConfigsPage',

    'create_oidc_provider_config',
    'create_saml_provider_config',
    'get_oidc_provider_config',
    'get_saml_provider_config',
    'list_oidc_provider_configs',
    'list_saml_provider_configs',
    'update_oidc_provider_config',
    'update_saml_provider_config',
]

AsyncListProviderConfigsPage = _provider_mgt_async.AsyncListProviderConfigsPage


class AsyncClient:
    """Async provider config client scoped to a project, and optionally to a tenant.

    Use it as an async context manager, or call ``aclose()`` when done with it.
    """

    def __init__(self, app, tenant_id=None, http2=True):
        project_id = provider_configs.require_project_id(app)
        credential, url_override = provider_configs.resolve_endpoint(app)
        timeout = app.options.get('httpTimeout', _http_client.DEFAULT_TIMEOUT_SECONDS)
        self._tenant_id = tenant_id
        self._http_client = _http_client.HttpxAsyncClient(
            credential=credential, timeout=timeout, http2=http2)
        self._provider_manager = _provider_mgt_async.AsyncProviderConfigClient(
            self._http_client, project_id, tenant_id, url_override=url_override)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    @property
    def tenant_id(self):
        return self._tenant_id

    async def get_oidc_provider_config(self, provider_id):
        return await self._provider_manager.get_oidc_provider_config(provider_id)

    async def create_oidc_provider_config(
            self, provider_id, client_id, issuer, display_name=None, enabled=None,
            client_secret=None, id_token_response_type=None, code_response_type=None):
        return await self._provider_manager.create_oidc_provider_config(
            provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
            enabled=enabled, client_secret=client_secret,
            id_token_response_type=id_token_response_type,
            code_response_type=code_response_type)

    async def update_oidc_provider_config(
            self, provider_id, client_id=None, issuer=None, display_name=None, enabled=None,
            client_secret=None, id_token_response_type=None, code_response_type=None):
        return await self._provider_manager.update_oidc_provider_config(
            provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
            enabled=enabled, client_secret=client_secret,
            id_token_response_type=id_token_response_type,
            code_response_type=code_response_type)

    async def list_oidc_provider_configs(
            self, page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS):
        """Retrieves the first page of OIDC provider configs.

        Returns:
            AsyncListProviderConfigsPage: A page of OIDC provider config instances.
        """
        return await self._provider_manager.list_oidc_provider_configs(page_token, max_results)

    async def get_saml_provider_config(self, provider_id):
        return await self._provider_manager.get_saml_provider_config(provider_id)

    async def create_saml_provider_config(self, provider_id, **kwargs):
        return await self._provider_manager.create_saml_provider_config(provider_id, **kwargs)

    async def update_saml_provider_config(self, provider_id, **kwargs):
        return await self._provider_manager.update_saml_provider_config(provider_id, **kwargs)

    async def list_saml_provider_configs(
            self, page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS):
        return await self._provider_manager.list_saml_provider_configs(page_token, max_results)

    async def aclose(self):
        await self._http_client.aclose()


def _get_client(app):
    """Returns the async client of an App, creating it on first use.

    Raises:
        ValueError: If the app argument is invalid.
    """
    return _utils.get_app_service(app, _PROVIDER_CONFIGS_ATTRIBUTE, AsyncClient)


async def get_oidc_provider_config(provider_id, app=None):
    """Returns the ``OIDCProviderConfig`` with the given ID.

    Raises:
        ValueError: If the provider ID is invalid, empty or does not have ``oidc.`` prefix.
        ConfigurationNotFoundError: If no OIDC provider is available with the given identifier.
        IdentityToolkitError: If an error occurs while retrieving the OIDC provider.
    """
    client = _get_client(app)
    return await client.get_oidc_provider_config(provider_id)


async def create_oidc_provider_config(
        provider_id, client_id, issuer, display_name=None, enabled=None, client_secret=None,
        id_token_response_type=None, code_response_type=None, app=None):
    client = _get_client(app)
    return await client.create_oidc_provider_config(
        provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
        enabled=enabled, client_secret=client_secret,
        id_token_response_type=id_token_response_type, code_response_type=code_response_type)


async def update_oidc_provider_config(
        provider_id, client_id=None, issuer=None, display_name=None, enabled=None,
        client_secret=None, id_token_response_type=None, code_response_type=None, app=None):
    client = _get_client(app)
    return await client.update_oidc_provider_config(
        provider_id, client_id=client_id, issuer=issuer, display_name=display_name,
        enabled=enabled, client_secret=client_secret,
        id_token_response_type=id_token_response_type, code_response_type=code_response_type)


async def list_oidc_provider_configs(
        page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS, app=None):
    client = _get_client(app)
    return await client.list_oidc_provider_configs(page_token, max_results)


async def get_saml_provider_config(provider_id, app=None):
    client = _get_client(app)
    return await client.get_saml_provider_config(provider_id)


async def create_saml_provider_config(provider_id, app=None, **kwargs):
    """Always raises ``UnsupportedOperationError``, without looking up the App."""
    _provider_mgt.SAML.ensure_supported(_provider_mgt.CREATE)
    client = _get_client(app)
    return await client.create_saml_provider_config(provider_id, **kwargs)


async def update_saml_provider_config(provider_id, app=None, **kwargs):
    _provider_mgt.SAML.ensure_supported(_provider_mgt.UPDATE)
    client = _get_client(app)
    return await client.update_saml_provider_config(provider_id, **kwargs)


async def list_saml_provider_configs(
        page_token=None, max_results=_provider_mgt.MAX_LIST_CONFIGS_RESULTS, app=None):
    _provider_mgt.SAML.ensure_supported(_provider_mgt.LIST)
    client = _get_client(app)
    return await client.list_saml_provider_configs(page_token, max_results)
