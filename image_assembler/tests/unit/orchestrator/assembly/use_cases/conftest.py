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

"""Shared fixtures for use case tests."""

import pytest

from image_assembler.infra.sif_writer import SIFContainerWriter
from tests.mocks.fake_assembly_ports import (
    FakeArchitectureResolver,
    FakeContainerIdGenerator,
    FakeFilesystemEncryptor,
    FakeKeyService,
    FakeOwnershipFinalizer,
    FakePartitionBuilder,
)


@pytest.fixture
def partition_builder():
    """Provide fake partition builder."""
    return FakePartitionBuilder()


@pytest.fixture
def architecture_resolver():
    """Provide fake architecture resolver."""
    return FakeArchitectureResolver()


@pytest.fixture
def key_service():
    """Provide fake key service."""
    return FakeKeyService()


@pytest.fixture
def filesystem_encryptor(scratch_dir):
    """Provide fake filesystem encryptor writing to the scratch directory."""
    return FakeFilesystemEncryptor(str(scratch_dir))


@pytest.fixture
def container_id_generator():
    """Provide fake ContainerId generator."""
    return FakeContainerIdGenerator()


@pytest.fixture
def ownership_finalizer():
    """Provide fake ownership finalizer."""
    return FakeOwnershipFinalizer()


@pytest.fixture
def container_writer():
    """Provide real SIF writer with a fixed clock."""
    return SIFContainerWriter(clock=lambda: 1700000000)


@pytest.fixture
def out_dir(tmp_path):
    """Provide the image output directory."""
    path = tmp_path / "out"
    path.mkdir()
    return path
