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

"""Identity provider configuration management async sub module."""

import logging

import httpx

from identity_admin import _provider_mgt
from identity_admin import _provider_utils
from identity_admin._provider_mgt import CREATE, LIST, OIDC, SAML, UPDATE


logger = logging.getLogger(__name__)

MAX_LIST_CONFIGS_RESULTS = _provider_mgt.MAX_LIST_CONFIGS_RESULTS


class AsyncListProviderConfigsPage(_provider_mgt.ProviderConfigPageData):
    """A page of ProviderConfig instances, retrieved with the async client.

    Use ``await page.get_next_page()`` to fetch the following page, or iterate with
    ``async for`` over ``iterate_all()`` (individual configs) or ``iterate_pages()`` (whole
    pages). Nothing is fetched ahead of the caller.
    """

    def __init__(self, download, max_results, provider_type, data):
        self._download = download
        self._max_results = max_results
        super().__init__(provider_type, data)

    @classmethod
    async def fetch(cls, download, page_token, max_results, provider_type):
        data = await download(page_token, max_results)
        return cls(download, max_results, provider_type, data)

    async def get_next_page(self):
        """Retrieves the next page of provider configs, if available.

        Returns:
            AsyncListProviderConfigsPage: Next page of provider configs, or None if this is the
            last page.
        """
        if self.has_next_page:
            return await self.fetch(
                self._download, self.next_page_token, self._max_results, self._provider_type)
        return None

    def iterate_all(self):
        """Returns an async iterator over all provider configs, starting from this page."""
        return _AsyncProviderConfigIterator(self)

    def iterate_pages(self):
        """Returns an async iterator over pages, starting with this page."""
        return _AsyncPagesIterator(self)


class _AsyncPagesIterator:

    def __init__(self, first_page):
        self._first_page = first_page
        self._current_page = None

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._current_page is None:
            self._current_page = self._first_page
        elif self._current_page.has_next_page:
            self._current_page = await self._current_page.get_next_page()
        else:
            raise StopAsyncIteration
        return self._current_page


class _AsyncProviderConfigIterator:

    def __init__(self, first_page):
        self._pages = _AsyncPagesIterator(first_page)
        self._iter = iter(())

    def __aiter__(self):
        return self

    async def __anext__(self):
        while True:
            try:
                return next(self._iter)
            except StopIteration:
                page = await self._pages.__anext__()
                self._iter = iter(page.provider_configs)


class AsyncProviderConfigClient(_provider_mgt.ProviderConfigRequests):
    """Async client for managing identity provider configurations.

    Every operation suspends only while awaiting the HTTP exchange. Arguments are validated,
    and the request is built, before the first suspension point.
    """

    def __init__(self, http_client, project_id, tenant_id=None, url_override=None):
        super().__init__(project_id, tenant_id, url_override)
        self.http_client = http_client

    async def get_oidc_provider_config(self, provider_id):
        return await self._get_provider_config(OIDC, provider_id)

    async def create_oidc_provider_config(self, provider_id, **kwargs):
        OIDC.ensure_supported(CREATE)
        OIDC.validate_provider_id(provider_id)
        payload = _provider_mgt.build_oidc_create_payload(**kwargs)
        request = self.create_request(OIDC, provider_id, payload)
        return OIDC.to_config(await self._make_request(request))

    async def update_oidc_provider_config(self, provider_id, **kwargs):
        OIDC.ensure_supported(UPDATE)
        OIDC.validate_provider_id(provider_id)
        payload = _provider_mgt.build_oidc_update_payload(**kwargs)
        request = self.update_request(OIDC, provider_id, payload)
        return OIDC.to_config(await self._make_request(request))

    async def list_oidc_provider_configs(
            self, page_token=None, max_results=MAX_LIST_CONFIGS_RESULTS):
        return await self._list_provider_configs(OIDC, page_token, max_results)

    async def get_saml_provider_config(self, provider_id):
        return await self._get_provider_config(SAML, provider_id)

    async def create_saml_provider_config(self, provider_id, **kwargs):
        SAML.ensure_supported(CREATE)
        request = self.create_request(SAML, provider_id, kwargs)
        return SAML.to_config(await self._make_request(request))

    async def update_saml_provider_config(self, provider_id, **kwargs):
        SAML.ensure_supported(UPDATE)
        request = self.update_request(SAML, provider_id, kwargs)
        return SAML.to_config(await self._make_request(request))

    async def list_saml_provider_configs(
            self, page_token=None, max_results=MAX_LIST_CONFIGS_RESULTS):
        return await self._list_provider_configs(SAML, page_token, max_results)

    async def _get_provider_config(self, provider_type, provider_id):
        request = self.get_request(provider_type, provider_id)
        return provider_type.to_config(await self._make_request(request))

    async def _list_provider_configs(self, provider_type, page_token, max_results):
        provider_type.ensure_supported(LIST)
        _provider_utils.validate_page_token(page_token)
        _provider_utils.validate_max_results(max_results)

        async def download(token, size):
            logger.debug('Fetching page of %s provider configs', provider_type.label)
            return await self._make_request(self.list_request(provider_type, token, size))

        return await AsyncListProviderConfigsPage.fetch(
            download, page_token, max_results, provider_type)

    async def _make_request(self, request):
        try:
            resp = await self.http_client.send(request)
        except httpx.HTTPError as error:
            raise _provider_utils.handle_backend_error_httpx(error)
        return _provider_utils.parse_response_body(self.http_client, resp)
