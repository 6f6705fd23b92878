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

"""Port interfaces (Protocols) for the image assembly domain.

These define the contracts that infrastructure implementations must satisfy.
Using Protocol instead of ABC allows for structural subtyping (duck typing).
"""

from typing import List, Optional, Protocol, Tuple

from .entities import ContainerHandle, CreateInfo
from .value_objects import ContainerId, KeyInfo


class ContainerIdGenerator(Protocol):
    """Generator port for creating container identifiers."""

    def generate(self) -> ContainerId:
        """Generate a new container identifier.

        Returns:
            A new, unique ContainerId.

        Raises:
            IdentifierGenerationError: If no identifier could be produced.
        """
        ...


class PartitionBuilder(Protocol):
    """Port for the filesystem compression tool."""

    def create(self, sources: List[str], dest: str, flags: List[str]) -> None:
        """Compress source directories into a single partition file.

        Args:
            sources: One or more source directories.
            dest: Partition file to create.
            flags: Tool flags.

        Raises:
            PartitionBuildError: If the tool fails.
        """
        ...


class ArchitectureResolver(Protocol):
    """Port resolving the target architecture of a root filesystem."""

    def resolve(self, rootfs_path: str) -> str:
        """Return a canonical architecture tag, never raising."""
        ...


class KeyService(Protocol):
    """Port for plaintext key derivation and asymmetric key wrapping."""

    def new_plaintext_key(self, key_info: KeyInfo) -> bytes:
        """Derive or generate the symmetric key.

        Raises:
            KeyDerivationError: If no key can be obtained.
        """
        ...

    def encrypt_key(self, key_info: KeyInfo, plaintext: bytes) -> Optional[bytes]:
        """Wrap the plaintext key for embedding.

        Returns:
            Wrapped key bytes, or None when the key format wraps to nothing.

        Raises:
            KeyWrapError: If wrapping fails.
        """
        ...


class FilesystemEncryptor(Protocol):
    """Port for the block-level encryption facility."""

    def encrypt_filesystem(self, path: str, key: bytes) -> str:
        """Encrypt a partition file into a new block-backed file.

        Args:
            path: Plaintext partition file.
            key: Symmetric key.

        Returns:
            Path of the encrypted file. The caller removes it.

        Raises:
            FilesystemEncryptionError: If encryption fails.
        """
        ...


class ContainerImage(Protocol):
    """Image built by a ContainerWriter, awaiting commit."""

    handle: ContainerHandle
    size: int

    def unload(self) -> None:
        """Commit the image at its destination.

        Raises:
            ContainerFinalizeError: If the commit fails.
            ContainerStateError: If the handle is not open.
        """
        ...

    def discard(self) -> None:
        """Drop the uncommitted image, leaving the destination untouched.

        Raises:
            ContainerStateError: If the handle is not open.
        """
        ...


class ContainerWriter(Protocol):
    """Port for the container serialization library."""

    def create(self, info: CreateInfo) -> ContainerImage:
        """Serialize descriptors in order into a new image.

        Raises:
            ContainerWriteError: On any I/O failure.
        """
        ...


class OwnershipFinalizer(Protocol):
    """Port handing a finished image over to the invoking user."""

    def finalize(self, path: str) -> Optional[Tuple[int, int]]:
        """Change ownership when warranted.

        Returns:
            The applied (uid, gid), or None when nothing was changed.

        Raises:
            OwnershipChangeError: If the change itself fails.
        """
        ...
