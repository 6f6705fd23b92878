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

"""Shared pytest fixtures for image assembler tests."""

import sys
from pathlib import Path

import pytest

# Make "image_assembler" and "tests.utils" importable without installation
PACKAGE_ROOT = Path(__file__).parent.parent
REPO_ROOT = PACKAGE_ROOT.parent
for path in (REPO_ROOT, PACKAGE_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


@pytest.fixture
def rootfs(tmp_path):
    """Create a minimal root filesystem directory.

    Returns:
        Path to a directory holding an empty /bin.
    """
    root = tmp_path / "rootfs"
    (root / "bin").mkdir(parents=True)
    return root


@pytest.fixture
def scratch_dir(tmp_path):
    """Create an empty scratch directory owned by one build."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def rsa_public_key_pem(tmp_path):
    """Write a fresh RSA public key and return (path, private_key)."""
    from cryptography.hazmat.primitives import serialization  # noqa: PLC0415
    from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: PLC0415

    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    path = tmp_path / "recipient.pem"
    path.write_bytes(public_pem)
    return str(path), private_key
