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

"""Tests for identity_admin.credentials module."""
import json

import google.auth
from google.auth import exceptions as auth_exceptions
import pytest
from pytest_mock import MockerFixture

import identity_admin
from identity_admin import credentials
from tests import testutils


class TestCertificate:

    invalid_certs = {
        'NonExistingFile': ('non_existing.json', IOError),
        'RefreshToken': ({'type': 'authorized_user'}, ValueError),
        'MalformedPrivateKey': ({'type': 'service_account', 'private_key': 'not a key',
                                 'client_email': 'foo@bar.com',
                                 'token_uri': 'https://oauth2.googleapis.com/token'}, ValueError),
        'MissingClientId': ({'type': 'service_account'}, ValueError),
    }

    @pytest.mark.parametrize('file_name,error', invalid_certs.values(), ids=list(invalid_certs))
    def test_init_from_invalid_certificate(self, file_name, error):
        with pytest.raises(error):
            credentials.Certificate(file_name)

    @pytest.mark.parametrize('arg', [None, 0, 1, True, False, list(), tuple()])
    def test_invalid_args(self, arg):
        with pytest.raises(ValueError):
            credentials.Certificate(arg)

    def test_wrong_type_in_file(self, tmp_path):
        cert_file = tmp_path / 'cert.json'
        cert_file.write_text(json.dumps({'type': 'authorized_user'}))
        with pytest.raises(ValueError) as excinfo:
            credentials.Certificate(str(cert_file))
        assert 'service_account' in str(excinfo.value)


class TestApplicationDefault:

    def test_lazy_initialization(self, mocker: MockerFixture):
        google_credential = testutils.MockGoogleCredential()
        default = mocker.patch.object(
            google.auth, 'default', return_value=(google_credential, 'adc-project'))

        credential = credentials.ApplicationDefault()
        assert default.call_count == 0

        assert credential.get_credential() is google_credential
        assert credential.project_id == 'adc-project'
        assert default.call_count == 1
        _, kwargs = default.call_args
        assert kwargs['scopes'] == [
            'https://www.googleapis.com/auth/cloud-platform',
            'https://www.googleapis.com/auth/identitytoolkit',
        ]

    def test_unavailable(self, mocker: MockerFixture):
        mocker.patch.object(
            google.auth, 'default', side_effect=auth_exceptions.DefaultCredentialsError('none'))
        credential = credentials.ApplicationDefault()
        with pytest.raises(auth_exceptions.DefaultCredentialsError):
            credential.get_credential()

    def test_app_project_id_ignores_missing_adc(self, mocker: MockerFixture, monkeypatch):
        mocker.patch.object(
            google.auth, 'default', side_effect=auth_exceptions.DefaultCredentialsError('none'))
        monkeypatch.delenv('GOOGLE_CLOUD_PROJECT', raising=False)
        monkeypatch.setenv('GCLOUD_PROJECT', 'env-project')
        app = identity_admin.initialize_app(credentials.ApplicationDefault(), name='adc')
        try:
            assert app.project_id == 'env-project'
        finally:
            identity_admin.delete_app(app)


class TestGoogleCredential:

    def test_wraps_credential(self):
        google_credential = testutils.MockGoogleCredential()
        credential = credentials.from_google_credential(google_credential)
        assert isinstance(credential, credentials.Base)
        assert credential.get_credential() is google_credential
        assert credential.project_id is None

    @pytest.mark.parametrize('arg', [None, 'token', {}, testutils.MockCredential()])
    def test_invalid_credential(self, arg):
        with pytest.raises(ValueError):
            credentials.from_google_credential(arg)
