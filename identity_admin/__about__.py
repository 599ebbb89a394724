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

"""About information (version, etc) for the Identity Admin SDK."""

__version__ = '1.0.0'
__title__ = 'identity_admin'
__author__ = 'Identity Admin SDK Authors'
__license__ = 'Apache License 2.0'
__url__ = 'https://cloud.google.com/identity-platform/docs'
