# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
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

"""Shared fixtures and utilities for entity tests."""

import pytest

from image_assembler.core.assembly.value_objects import ContainerId, KeyFormat, KeyInfo


@pytest.fixture
def sample_container_id():
    """Sample container ID for testing."""
    return ContainerId("3f2b8c1e-9d4a-4b6e-8f1a-2c3d4e5f6a7b")


@pytest.fixture
def sample_key_info():
    """Sample passphrase key specification."""
    return KeyInfo(format=KeyFormat.PASSPHRASE, material="correct horse")
