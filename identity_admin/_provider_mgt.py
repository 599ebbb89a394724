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

"""Identity provider configuration management sub module."""

import logging

import requests

from identity_admin import _provider_utils
from identity_admin import _request_builder


logger = logging.getLogger(__name__)

MAX_LIST_CONFIGS_RESULTS = _provider_utils.MAX_LIST_CONFIGS_RESULTS

GET = 'get'
CREATE = 'create'
UPDATE = 'update'
LIST = 'list'


class ProviderConfig:
    """Parent type for all identity provider config types."""

    def __init__(self, data):
        if not isinstance(data, dict):
            raise ValueError('Invalid data argument: {0}. Must be a dictionary.'.format(data))
        self._data = data

    @property
    def provider_id(self):
        name = self._data['name']
        return name.split('/')[-1]

    @property
    def display_name(self):
        return self._data.get('displayName')

    @property
    def enabled(self):
        return self._data.get('enabled', False)


class OIDCProviderConfig(ProviderConfig):
    """Represents the OIDC identity provider configuration.

    See https://openid.net/specs/openid-connect-core-1_0-final.html.
    """

    @property
    def issuer(self):
        return self._data['issuer']

    @property
    def client_id(self):
        return self._data['clientId']

    @property
    def client_secret(self):
        return self._data.get('clientSecret')

    @property
    def id_token_response_type(self):
        return self._data.get('responseType', {}).get('idToken', False)

    @property
    def code_response_type(self):
        return self._data.get('responseType', {}).get('code', False)


class SAMLProviderConfig(ProviderConfig):
    """Represents the SAML identity provider configuration.

    See http://docs.oasis-open.org/security/saml/Post2.0/sstc-saml-tech-overview-2.0.html.
    """

    @property
    def idp_entity_id(self):
        return self._data.get('idpConfig', {})['idpEntityId']

    @property
    def sso_url(self):
        return self._data.get('idpConfig', {})['ssoUrl']

    @property
    def x509_certificates(self):
        certs = self._data.get('idpConfig', {}).get('idpCertificates', [])
        return [c['x509Certificate'] for c in certs]

    @property
    def callback_url(self):
        return self._data.get('spConfig', {})['callbackUri']

    @property
    def rp_entity_id(self):
        return self._data.get('spConfig', {})['spEntityId']


class ProviderType:
    """Describes one kind of identity provider, and how its configs are addressed remotely.

    Provider IDs of a kind always carry the kind's prefix (``oidc.`` or ``saml.``). Operations
    the backend integration does not offer for a kind raise ``UnsupportedOperationError``
    before any argument is inspected.
    """

    def __init__(self, label, prefix, collection, id_param, config_type, operations):
        self.label = label
        self.prefix = prefix
        self.collection = collection
        self.id_param = id_param
        self.config_type = config_type
        self.operations = frozenset(operations)

    def ensure_supported(self, operation):
        if operation not in self.operations:
            raise _provider_utils.UnsupportedOperationError(
                'Operation "{0}" is not supported for {1} provider configs.'.format(
                    operation, self.label))

    def validate_provider_id(self, provider_id):
        if not isinstance(provider_id, str) or not provider_id:
            raise ValueError(
                'Invalid {0} provider ID: {1}. Provider ID must be a non-empty string.'.format(
                    self.label, provider_id))
        if not provider_id.startswith(self.prefix):
            raise ValueError(
                'Invalid {0} provider ID: {1}. Provider ID must have the prefix "{2}".'.format(
                    self.label, provider_id, self.prefix))
        return provider_id

    def resource_path(self, provider_id):
        return '{0}/{1}'.format(self.collection, provider_id)

    def to_config(self, data):
        return self.config_type(data)

    def to_configs(self, page_data):
        return [self.config_type(data) for data in page_data.get(self.collection) or []]


OIDC = ProviderType(
    'OIDC', 'oidc.', 'oauthIdpConfigs', 'oauthIdpConfigId', OIDCProviderConfig,
    (GET, CREATE, UPDATE, LIST))

SAML = ProviderType(
    'SAML', 'saml.', 'inboundSamlConfigs', 'inboundSamlConfigId', SAMLProviderConfig, (GET,))


class ProviderConfigPageData:
    """Read-only view of a single list response."""

    def __init__(self, provider_type, data):
        self._provider_type = provider_type
        self._current = data or {}

    @property
    def provider_configs(self):
        """A list of ``ProviderConfig`` instances available in this page."""
        return self._provider_type.to_configs(self._current)

    @property
    def next_page_token(self):
        """Page token string for the next page (empty string indicates no more pages)."""
        return self._current.get('nextPageToken') or ''

    @property
    def has_next_page(self):
        """A boolean indicating whether more pages are available."""
        return bool(self.next_page_token)


class ListProviderConfigsPage(ProviderConfigPageData):
    """Represents a page of ProviderConfig instances retrieved from a project.

    Provides methods for traversing the provider configs included in this page, as well as
    retrieving subsequent pages. Pages are fetched one at a time, and only when asked for:
    ``get_next_page()`` issues exactly one request, and the iterators returned by
    ``iterate_all()`` and ``iterate_pages()`` fetch the next page only after the current one
    has been consumed.
    """

    def __init__(self, download, page_token, max_results, provider_type):
        self._download = download
        self._max_results = max_results
        super().__init__(provider_type, download(page_token, max_results))

    def get_next_page(self):
        """Retrieves the next page of provider configs, if available.

        Returns:
            ListProviderConfigsPage: Next page of provider configs, or None if this is the last
            page.
        """
        if self.has_next_page:
            return self.__class__(
                self._download, self.next_page_token, self._max_results, self._provider_type)
        return None

    def iterate_all(self):
        """Retrieves an iterator for provider configs.

        Returned iterator will iterate through all the provider configs in the project
        starting from this page. The iterator will never buffer more than one page of configs
        in memory at a time.

        Returns:
            iterator: An iterator of ProviderConfig instances.
        """
        return _ProviderConfigIterator(self)

    def iterate_pages(self):
        """Retrieves an iterator for pages, starting with this page.

        Returns:
            iterator: An iterator of ListProviderConfigsPage instances.
        """
        return _provider_utils.PagesIterator(self)


class _ProviderConfigIterator(_provider_utils.PageIterator):

    @property
    def items(self):
        return self._current_page.provider_configs


class ProviderConfigRequests:
    """Builds the requests of every provider config operation.

    Shared by the blocking and the async managers, which differ only in how requests are sent.
    """

    PROVIDER_CONFIG_URL = 'https://identitytoolkit.googleapis.com/v2'

    def __init__(self, project_id, tenant_id=None, url_override=None):
        url_prefix = url_override or self.PROVIDER_CONFIG_URL
        base_url = '{0}/projects/{1}'.format(url_prefix, project_id)
        if tenant_id:
            base_url += '/tenants/{0}'.format(tenant_id)
        self.tenant_id = tenant_id
        self.builder = _request_builder.RequestBuilder(base_url)

    @property
    def base_url(self):
        return self.builder.base_url

    def get_request(self, provider_type, provider_id):
        provider_type.ensure_supported(GET)
        provider_type.validate_provider_id(provider_id)
        return self.builder.build('get', provider_type.resource_path(provider_id))

    def create_request(self, provider_type, provider_id, payload):
        provider_type.ensure_supported(CREATE)
        provider_type.validate_provider_id(provider_id)
        query = {provider_type.id_param: provider_id}
        return self.builder.build('post', provider_type.collection, body=payload, query=query)

    def update_request(self, provider_type, provider_id, payload):
        provider_type.ensure_supported(UPDATE)
        provider_type.validate_provider_id(provider_id)
        update_mask = _provider_utils.build_update_mask(payload)
        if not update_mask:
            raise ValueError('At least one field must be specified for update.')

        query = {'updateMask': ','.join(update_mask)}
        return self.builder.build(
            'patch', provider_type.resource_path(provider_id), body=payload, query=query)

    def list_request(self, provider_type, page_token=None, max_results=MAX_LIST_CONFIGS_RESULTS):
        provider_type.ensure_supported(LIST)
        page_token = _provider_utils.validate_page_token(page_token)
        query = {'pageSize': _provider_utils.validate_max_results(max_results)}
        if page_token:
            query['pageToken'] = page_token
        return self.builder.build('get', provider_type.collection, query=query)


class ProviderConfigClient(ProviderConfigRequests):
    """Client for managing identity provider configurations.

    Holds no mutable state beyond the HTTP client, and can be shared between threads.
    """

    def __init__(self, http_client, project_id, tenant_id=None, url_override=None):
        super().__init__(project_id, tenant_id, url_override)
        self.http_client = http_client

    def get_oidc_provider_config(self, provider_id):
        return self._get_provider_config(OIDC, provider_id)

    def create_oidc_provider_config(self, provider_id, **kwargs):
        OIDC.ensure_supported(CREATE)
        OIDC.validate_provider_id(provider_id)
        payload = build_oidc_create_payload(**kwargs)
        return self._create_provider_config(OIDC, provider_id, payload)

    def update_oidc_provider_config(self, provider_id, **kwargs):
        OIDC.ensure_supported(UPDATE)
        OIDC.validate_provider_id(provider_id)
        payload = build_oidc_update_payload(**kwargs)
        return self._update_provider_config(OIDC, provider_id, payload)

    def list_oidc_provider_configs(self, page_token=None, max_results=MAX_LIST_CONFIGS_RESULTS):
        return self._list_provider_configs(OIDC, page_token, max_results)

    def get_saml_provider_config(self, provider_id):
        return self._get_provider_config(SAML, provider_id)

    def create_saml_provider_config(self, provider_id, **kwargs):
        SAML.ensure_supported(CREATE)
        return self._create_provider_config(SAML, provider_id, kwargs)

    def update_saml_provider_config(self, provider_id, **kwargs):
        SAML.ensure_supported(UPDATE)
        return self._update_provider_config(SAML, provider_id, kwargs)

    def list_saml_provider_configs(self, page_token=None, max_results=MAX_LIST_CONFIGS_RESULTS):
        return self._list_provider_configs(SAML, page_token, max_results)

    def _get_provider_config(self, provider_type, provider_id):
        request = self.get_request(provider_type, provider_id)
        return provider_type.to_config(self._make_request(request))

    def _create_provider_config(self, provider_type, provider_id, payload):
        request = self.create_request(provider_type, provider_id, payload)
        return provider_type.to_config(self._make_request(request))

    def _update_provider_config(self, provider_type, provider_id, payload):
        request = self.update_request(provider_type, provider_id, payload)
        return provider_type.to_config(self._make_request(request))

    def _list_provider_configs(self, provider_type, page_token, max_results):
        provider_type.ensure_supported(LIST)
        # Validate eagerly, so that bad arguments fail before the first fetch.
        _provider_utils.validate_page_token(page_token)
        _provider_utils.validate_max_results(max_results)

        def download(token, size):
            logger.debug('Fetching page of %s provider configs', provider_type.label)
            return self._make_request(self.list_request(provider_type, token, size))

        return ListProviderConfigsPage(download, page_token, max_results, provider_type)

    def _make_request(self, request):
        try:
            resp = self.http_client.send(request)
        except requests.exceptions.RequestException as error:
            raise _provider_utils.handle_backend_error(error)
        return _provider_utils.parse_response_body(self.http_client, resp)


def build_oidc_create_payload(
        client_id, issuer, display_name=None, enabled=None, client_secret=None,
        id_token_response_type=None, code_response_type=None):
    """Creates the request body of a new OIDC provider config."""
    req = {
        'clientId': _provider_utils.validate_non_empty_string(client_id, 'client_id'),
        'issuer': _provider_utils.validate_url(issuer, 'issuer'),
    }
    if display_name is not None:
        req['displayName'] = _provider_utils.validate_string(display_name, 'display_name')
    if enabled is not None:
        req['enabled'] = _provider_utils.validate_boolean(enabled, 'enabled')
    _add_oidc_response_type(
        req, client_secret, id_token_response_type, code_response_type)
    return req


def build_oidc_update_payload(
        client_id=None, issuer=None, display_name=None, enabled=None, client_secret=None,
        id_token_response_type=None, code_response_type=None):
    """Creates the request body of an OIDC provider config update.

    Only the given fields appear in the body, which in turn determines the update mask.
    """
    req = {}
    if display_name is not None:
        if display_name is _provider_utils.DELETE_ATTRIBUTE:
            req['displayName'] = None
        else:
            req['displayName'] = _provider_utils.validate_string(display_name, 'display_name')
    if enabled is not None:
        req['enabled'] = _provider_utils.validate_boolean(enabled, 'enabled')
    if client_id is not None:
        req['clientId'] = _provider_utils.validate_non_empty_string(client_id, 'client_id')
    if issuer is not None:
        req['issuer'] = _provider_utils.validate_url(issuer, 'issuer')
    _add_oidc_response_type(
        req, client_secret, id_token_response_type, code_response_type)
    return req


def _add_oidc_response_type(req, client_secret, id_token_response_type, code_response_type):
    if id_token_response_type is False and code_response_type is False:
        raise ValueError('At least one response type must be returned.')

    response_type = {}
    if id_token_response_type is not None:
        response_type['idToken'] = _provider_utils.validate_boolean(
            id_token_response_type, 'id_token_response_type')
    if code_response_type is not None:
        response_type['code'] = _provider_utils.validate_boolean(
            code_response_type, 'code_response_type')
        if code_response_type:
            req['clientSecret'] = _provider_utils.validate_non_empty_string(
                client_secret, 'client_secret')
    if response_type:
        req['responseType'] = response_type
