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

"""In-memory fakes of the image assembly ports."""

import os
import tempfile
from typing import List, Optional, Tuple

from image_assembler.core.assembly.exceptions import (
    FilesystemEncryptionError,
    IdentifierGenerationError,
    KeyWrapError,
    OwnershipChangeError,
    PartitionBuildError,
)
from image_assembler.core.assembly.ports import ContainerIdGenerator
from image_assembler.core.assembly.value_objects import ContainerId, KeyFormat, KeyInfo

SQUASHFS_DATA = b"hsqs" + b"\x5a" * 5000
LUKS_MAGIC = b"LUKS\xba\xbe"
WRAPPED_KEY = b"-----BEGIN MESSAGE-----\nBAQ=\n-----END MESSAGE-----\n"


class FakePartitionBuilder:
    """Fake mksquashfs writing fixed bytes to the destination."""
    def __init__(self, error: Optional[PartitionBuildError] = None) -> None:
        """Initialize the fake builder."""
        self.calls: List[Tuple[List[str], str, List[str]]] = []
        self._error = error

    def create(self, sources: List[str], dest: str, flags: List[str]) -> None:
        """Record the call and write the partition."""
        self.calls.append((list(sources), dest, list(flags)))
        if self._error is not None:
            raise self._error
        with open(dest, "wb") as f:
            f.write(SQUASHFS_DATA)


class FakeArchitectureResolver:
    """Fake resolver returning a fixed architecture."""
    def __init__(self, arch: str = "amd64") -> None:
        self._arch = arch

    def resolve(self, rootfs_path: str) -> str:
        """Return the configured architecture."""
        return self._arch


class FakeKeyService:
    """Fake key service with a fixed plaintext key."""
    def __init__(
        self,
        plaintext: bytes = b"p" * 64,
        wrapped: Optional[bytes] = WRAPPED_KEY,
        wrap_error: Optional[KeyWrapError] = None,
    ) -> None:
        """Initialize the fake key service."""
        self.plaintext = plaintext
        self._wrapped = wrapped
        self._wrap_error = wrap_error
        self.wrapped_plaintexts: List[bytes] = []

    def new_plaintext_key(self, key_info: KeyInfo) -> bytes:
        """Return the fixed plaintext key."""
        return self.plaintext

    def encrypt_key(self, key_info: KeyInfo, plaintext: bytes) -> Optional[bytes]:
        """Return the fixed wrapped key, None for passphrases."""
        self.wrapped_plaintexts.append(plaintext)
        if self._wrap_error is not None:
            raise self._wrap_error
        if key_info.format != KeyFormat.PEM:
            return None
        return self._wrapped


class FakeFilesystemEncryptor:
    """Fake encryptor prefixing the partition with a LUKS magic."""
    def __init__(self, tmp_dir: str, error: Optional[FilesystemEncryptionError] = None) -> None:
        """Initialize the fake encryptor."""
        self._tmp_dir = tmp_dir
        self._error = error
        self.keys: List[bytes] = []
        self.crypt_paths: List[str] = []

    def encrypt_filesystem(self, path: str, key: bytes) -> str:
        """Write an 'encrypted' copy of the partition beside it."""
        self.keys.append(key)
        if self._error is not None:
            raise self._error
        fd, crypt_path = tempfile.mkstemp(prefix="crypt-", dir=self._tmp_dir)
        with os.fdopen(fd, "wb") as dst, open(path, "rb") as src:
            dst.write(LUKS_MAGIC + src.read())
        self.crypt_paths.append(crypt_path)
        return crypt_path


class FakeContainerIdGenerator(ContainerIdGenerator):
    """Fake ContainerId generator for testing."""
    def __init__(self, error: Optional[IdentifierGenerationError] = None) -> None:
        """Initialize the fake generator."""
        self._counter = 1
        self._error = error

    def generate(self) -> ContainerId:
        """Generate a predictable ContainerId for testing."""
        if self._error is not None:
            raise self._error
        container_id = f"3f2b8c1e-9d4a-4b6e-8f1a-2c3d4e5f6{self._counter:03d}"
        self._counter += 1
        return ContainerId(container_id)


class FakeOwnershipFinalizer:
    """Fake ownership finalizer with a fixed outcome."""
    def __init__(
        self,
        owner: Optional[Tuple[int, int]] = None,
        error: Optional[OwnershipChangeError] = None,
    ) -> None:
        """Initialize the fake finalizer."""
        self._owner = owner
        self._error = error
        self.paths: List[str] = []

    def finalize(self, path: str) -> Optional[Tuple[int, int]]:
        """Record the path and return the configured owner."""
        self.paths.append(path)
        if self._error is not None:
            raise self._error
        return self._owner
