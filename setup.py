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

"""Setup file for distribution artifacts."""
from os import path
import sys

from setuptools import setup


(major, minor) = (sys.version_info.major, sys.version_info.minor)
if major != 3 or minor < 8:
    print('identity_admin requires python >= 3.8', file=sys.stderr)
    sys.exit(1)

# Read in the package metadata per recommendations from:
# https://packaging.python.org/guides/single-sourcing-package-version/
about_path = path.join(path.dirname(path.abspath(__file__)), 'identity_admin', '__about__.py')
about = {}
with open(about_path, encoding='utf-8') as fp:
    exec(fp.read(), about)  # pylint: disable=exec-used


long_description = ('The Identity Admin Python SDK lets server-side Python developers manage '
                    'the OIDC and SAML identity provider configurations of a Google Cloud '
                    'Identity Platform project.')
install_requires = [
    'google-auth >= 2.24.0',
    'requests >= 2.28.0',
    'httpx[http2] >= 0.27.0',
]
extras_require = {
    'test': [
        'pytest >= 7.0.0',
        'pytest-asyncio >= 0.23.0',
        'pytest-mock >= 3.10.0',
        'pytest-localserver >= 0.7.0',
        'respx >= 0.21.0',
    ],
}

setup(
    name=about['__title__'],
    version=about['__version__'],
    description='Identity Admin Python SDK',
    long_description=long_description,
    url=about['__url__'],
    author=about['__author__'],
    license=about['__license__'],
    keywords='identity platform oidc saml cloud development',
    install_requires=install_requires,
    extras_require=extras_require,
    packages=['identity_admin'],
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: Build Tools',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'License :: OSI Approved :: Apache Software License',
    ],
)
