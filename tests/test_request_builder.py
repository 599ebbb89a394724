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

"""Test cases for the identity_admin._request_builder module."""

import requests

import identity_admin
from identity_admin import _request_builder


_BASE_URL = 'https://identitytoolkit.googleapis.com/v2/projects/mock-project-id'


class TestRequestBuilder:

    def test_build_get(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)

        request = builder.build('get', 'oauthIdpConfigs/oidc.provider')

        assert isinstance(request, requests.Request)
        assert request.method == 'GET'
        assert request.url == _BASE_URL + '/oauthIdpConfigs/oidc.provider'
        assert request.json is None
        assert request.headers['X-Client-Version'] == 'Python/Admin/{0}'.format(
            identity_admin.__version__)

    def test_header_lookup_is_case_insensitive(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)
        request = builder.build('get', 'oauthIdpConfigs')
        assert request.headers['x-client-version'] == builder.client_version

    def test_build_with_body_and_query(self):
        builder = _request_builder.RequestBuilder(_BASE_URL + '/')

        request = builder.build(
            'patch', '/oauthIdpConfigs/oidc.provider', body={'enabled': True},
            query={'updateMask': 'displayName,enabled'})

        assert request.method == 'PATCH'
        assert request.url == (
            _BASE_URL + '/oauthIdpConfigs/oidc.provider?updateMask=displayName,enabled')
        assert request.json == {'enabled': True}

    def test_query_order_is_preserved(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)
        request = builder.build('get', 'oauthIdpConfigs', query={'pageSize': 10, 'pageToken': 'a'})
        assert request.url == _BASE_URL + '/oauthIdpConfigs?pageSize=10&pageToken=a'

    def test_query_values_are_encoded(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)
        request = builder.build('get', 'oauthIdpConfigs', query={'pageToken': 'a b&c=d/e'})
        assert request.url == _BASE_URL + '/oauthIdpConfigs?pageToken=a%20b%26c%3Dd%2Fe'

    def test_absolute_url(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)
        request = builder.build('get', 'http://localhost:9099/other')
        assert request.url == 'http://localhost:9099/other'

    def test_custom_client_version(self):
        builder = _request_builder.RequestBuilder(_BASE_URL, client_version='Custom/1.0')
        request = builder.build('get', 'oauthIdpConfigs')
        assert request.headers['X-Client-Version'] == 'Custom/1.0'

    def test_add_client_version_keeps_existing_header(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)
        request = requests.Request('GET', _BASE_URL, headers={'x-client-version': 'Existing'})

        request = builder.add_client_version(request)
        request = builder.add_client_version(request)

        assert request.headers['X-Client-Version'] == 'Existing'
        assert len(request.headers) == 1

    def test_add_client_version(self):
        builder = _request_builder.RequestBuilder(_BASE_URL)
        request = requests.Request('GET', _BASE_URL)

        builder.add_client_version(request)

        assert request.headers['X-Client-Version'] == builder.client_version


class TestEncodeQuery:

    def test_empty(self):
        assert _request_builder.encode_query(None) == ''
        assert _request_builder.encode_query({}) == ''

    def test_commas_kept(self):
        assert _request_builder.encode_query({'updateMask': 'a,b.c'}) == '?updateMask=a,b.c'
