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

"""Tests for identity_admin.App."""
from collections import namedtuple

import pytest

import identity_admin
from identity_admin import credentials
from identity_admin import _utils
from tests import testutils

CREDENTIAL = testutils.MockCredential(project_id='mock-project-id')
CONFIG_JSON = identity_admin._CONFIG_ENV_VAR


class AppService:
    def __init__(self, app):
        self._app = app
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture(params=[None, 'myApp'], ids=['DefaultApp', 'CustomApp'])
def init_app(request):
    if request.param:
        return identity_admin.initialize_app(CREDENTIAL, name=request.param)

    return identity_admin.initialize_app(CREDENTIAL)


@pytest.fixture
def config_env(monkeypatch):
    def _set(config_json):
        if config_json is None:
            monkeypatch.delenv(CONFIG_JSON, raising=False)
        elif not config_json or config_json.startswith('{'):
            monkeypatch.setenv(CONFIG_JSON, config_json)
        else:
            monkeypatch.setenv(CONFIG_JSON, testutils.resource_filename(config_json))
    return _set


EnvOptionsTestCase = namedtuple('EnvOptionsTestCase',
                                'name, config_json, init_options, want_options')
env_options_test_cases = [
    EnvOptionsTestCase(name='Environment var not set, initialized with no options dict',
                       config_json=None,
                       init_options=None,
                       want_options={}),
    EnvOptionsTestCase(name='Environment empty, initialized with no options dict',
                       config_json='',
                       init_options=None,
                       want_options={}),
    EnvOptionsTestCase(name='Environment var set to file but ignored, initialized with options',
                       config_json='identity_admin_config.json',
                       init_options={'httpTimeout': 5},
                       want_options={'httpTimeout': 5}),
    EnvOptionsTestCase(name='Environment var set to file, initialized with no options dict',
                       config_json='identity_admin_config.json',
                       init_options=None,
                       want_options={'projectId': 'identity-project-mock', 'httpTimeout': 30}),
    EnvOptionsTestCase(name='Environment var set to json string, initialized with no options dict',
                       config_json='{"projectId": "identity-project-mock", "httpTimeout": 30}',
                       init_options=None,
                       want_options={'projectId': 'identity-project-mock', 'httpTimeout': 30}),
    EnvOptionsTestCase(name='Invalid key in json file is ignored',
                       config_json='identity_admin_config_invalid_key.json',
                       init_options=None,
                       want_options={'projectId': 'identity-project-mock'}),
    EnvOptionsTestCase(name='Environment var set to string but ignored, init empty options dict',
                       config_json='{"projectId": "identity-project-mock"}',
                       init_options={},
                       want_options={}),
]


class TestApp:
    """Test cases for App initialization and life cycle."""

    invalid_credentials = ['', 'foo', 0, 1, dict(), list(), tuple(), True, False]
    invalid_options = ['', 0, 1, list(), tuple(), True, False]
    invalid_names = [None, '', 0, 1, dict(), list(), tuple(), True, False]
    invalid_apps = [
        None, '', 0, 1, dict(), list(), tuple(), True, False,
        identity_admin.App('uninitialized', CREDENTIAL, {})
    ]

    def teardown_method(self):
        testutils.cleanup_apps()

    def test_default_app_init(self):
        app = identity_admin.initialize_app(CREDENTIAL)
        assert identity_admin._DEFAULT_APP_NAME == app.name
        assert app.credential is CREDENTIAL
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL)

    def test_non_default_app_init(self):
        app = identity_admin.initialize_app(CREDENTIAL, name='myApp')
        assert app.name == 'myApp'
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL, name='myApp')

    def test_application_default_credential(self):
        app = identity_admin.initialize_app()
        assert isinstance(app.credential, credentials.ApplicationDefault)

    @pytest.mark.parametrize('cred', invalid_credentials)
    def test_app_init_with_invalid_credential(self, cred):
        with pytest.raises(ValueError):
            identity_admin.initialize_app(cred)

    @pytest.mark.parametrize('options', invalid_options)
    def test_app_init_with_invalid_options(self, options):
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL, options=options)

    @pytest.mark.parametrize('name', invalid_names)
    def test_app_init_with_invalid_name(self, name):
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL, name=name)

    @pytest.mark.parametrize('bad_file_name', ['identity_admin_config_empty.json',
                                               'identity_admin_config_invalid.json',
                                               'no_such_file'])
    def test_app_init_with_invalid_config_file(self, config_env, bad_file_name):
        config_env(bad_file_name)
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL)

    def test_app_init_with_invalid_config_string(self, config_env):
        config_env('{,,')
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL)

    @pytest.mark.parametrize('test_case', env_options_test_cases,
                             ids=[x.name for x in env_options_test_cases])
    def test_app_init_with_default_config(self, config_env, test_case):
        config_env(test_case.config_json)
        app = identity_admin.initialize_app(CREDENTIAL, options=test_case.init_options)
        assert app.options._options == test_case.want_options

    def test_project_id_from_options(self):
        app = identity_admin.initialize_app(
            CREDENTIAL, options={'projectId': 'test-project'}, name='myApp')
        assert app.project_id == 'test-project'

    def test_project_id_from_credentials(self):
        app = identity_admin.initialize_app(CREDENTIAL, name='myApp')
        assert app.project_id == 'mock-project-id'

    @pytest.mark.parametrize('var', ['GOOGLE_CLOUD_PROJECT', 'GCLOUD_PROJECT'])
    def test_project_id_from_environment(self, monkeypatch, var):
        monkeypatch.delenv('GOOGLE_CLOUD_PROJECT', raising=False)
        monkeypatch.delenv('GCLOUD_PROJECT', raising=False)
        monkeypatch.setenv(var, 'env-project')
        app = identity_admin.initialize_app(testutils.MockCredential(), name='myApp')
        assert app.project_id == 'env-project'

    def test_no_project_id(self, monkeypatch):
        monkeypatch.delenv('GOOGLE_CLOUD_PROJECT', raising=False)
        monkeypatch.delenv('GCLOUD_PROJECT', raising=False)
        app = identity_admin.initialize_app(testutils.MockCredential(), name='myApp')
        assert app.project_id is None

    def test_non_string_project_id(self):
        options = {'projectId': {'key': 'not a string'}}
        with pytest.raises(ValueError):
            identity_admin.initialize_app(CREDENTIAL, options=options)

    def test_app_get(self, init_app):
        assert init_app is identity_admin.get_app(init_app.name)

    @pytest.mark.parametrize('args', [(), ('myApp',)],
                             ids=['DefaultApp', 'CustomApp'])
    def test_non_existing_app_get(self, args):
        with pytest.raises(ValueError):
            identity_admin.get_app(*args)

    @pytest.mark.parametrize('name', invalid_names)
    def test_app_get_with_invalid_name(self, name):
        with pytest.raises(ValueError):
            identity_admin.get_app(name)

    @pytest.mark.parametrize('app', invalid_apps)
    def test_invalid_app_delete(self, app):
        with pytest.raises(ValueError):
            identity_admin.delete_app(app)

    def test_app_delete(self, init_app):
        assert identity_admin.get_app(init_app.name) is init_app
        identity_admin.delete_app(init_app)
        with pytest.raises(ValueError):
            identity_admin.get_app(init_app.name)
        with pytest.raises(ValueError):
            identity_admin.delete_app(init_app)

    def test_app_services(self, init_app):
        service = _utils.get_app_service(init_app, 'test.service', AppService)
        assert isinstance(service, AppService)
        service2 = _utils.get_app_service(init_app, 'test.service', AppService)
        assert service is service2
        identity_admin.delete_app(init_app)
        assert service.closed is True
        with pytest.raises(ValueError):
            _utils.get_app_service(init_app, 'test.service', AppService)

    @pytest.mark.parametrize('arg', [0, 1, True, False, 'str', list(), dict(), tuple()])
    def test_app_services_invalid_arg(self, arg):
        with pytest.raises(ValueError):
            _utils.get_app_service(arg, 'test.service', AppService)

    def test_app_services_invalid_app(self, init_app):
        app = identity_admin.App(init_app.name, init_app.credential, {})
        with pytest.raises(ValueError):
            _utils.get_app_service(app, 'test.service', AppService)
