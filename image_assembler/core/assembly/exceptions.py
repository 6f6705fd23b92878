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

"""Domain exceptions for image assembly.

Every error names the pipeline stage it came from. None of the messages
carry key material.
"""

from typing import Optional

from .value_objects import AssemblyStage


class AssemblyDomainError(Exception):
    """Base exception for all image assembly errors."""

    stage: Optional[AssemblyStage] = None

    def __init__(self, message: str, destination: Optional[str] = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error description.
            destination: Optional image destination path for diagnostics.
        """
        super().__init__(message)
        self.message = message
        self.destination = destination


class IdentifierGenerationError(AssemblyDomainError):
    """Container identifier could not be generated."""

    stage = AssemblyStage.IDENTIFIER_GENERATION

    def __init__(self, reason: str, destination: Optional[str] = None) -> None:
        super().__init__(f"sif id generation failed: {reason}", destination=destination)
        self.reason = reason


class PartitionBuildError(AssemblyDomainError):
    """Compressed filesystem partition could not be built."""

    stage = AssemblyStage.PARTITION_BUILD

    def __init__(
        self,
        partition_path: str,
        reason: str,
        output: str = "",
        destination: Optional[str] = None
    ) -> None:
        """Initialize partition build error.

        Args:
            partition_path: Partition file the compressor was writing.
            reason: Short description of the failure.
            output: Captured compressor output, if any.
            destination: Optional image destination path.
        """
        message = f"while creating squashfs {partition_path}: {reason}"
        if output:
            message = f"{message}: {output}"
        super().__init__(message, destination=destination)
        self.partition_path = partition_path
        self.reason = reason
        self.output = output


class KeyDerivationError(AssemblyDomainError):
    """Plaintext encryption key could not be obtained."""

    stage = AssemblyStage.KEY_DERIVATION

    def __init__(self, reason: str, destination: Optional[str] = None) -> None:
        super().__init__(
            f"unable to obtain encryption key: {reason}",
            destination=destination
        )
        self.reason = reason


class FilesystemEncryptionError(AssemblyDomainError):
    """Partition file could not be turned into an encrypted block file."""

    stage = AssemblyStage.FILESYSTEM_ENCRYPTION

    def __init__(
        self,
        partition_path: str,
        reason: str,
        destination: Optional[str] = None
    ) -> None:
        """Initialize filesystem encryption error.

        Args:
            partition_path: Plaintext partition file being encrypted.
            reason: Failure description. Must not contain key material.
            destination: Optional image destination path.
        """
        super().__init__(
            f"unable to encrypt filesystem at {partition_path}: {reason}",
            destination=destination
        )
        self.partition_path = partition_path
        self.reason = reason


class KeyWrapError(AssemblyDomainError):
    """Plaintext key could not be wrapped for the recipient."""

    stage = AssemblyStage.KEY_WRAP

    def __init__(self, reason: str, destination: Optional[str] = None) -> None:
        super().__init__(
            f"while encrypting filesystem key: {reason}",
            destination=destination
        )
        self.reason = reason


class PartitionOpenError(AssemblyDomainError):
    """Partition file could not be opened for embedding."""

    stage = AssemblyStage.DESCRIPTOR_ASSEMBLY

    def __init__(
        self,
        partition_path: str,
        reason: str,
        destination: Optional[str] = None
    ) -> None:
        super().__init__(
            f"while opening partition file {partition_path}: {reason}",
            destination=destination
        )
        self.partition_path = partition_path
        self.reason = reason


class PartitionStatError(AssemblyDomainError):
    """Partition file size could not be determined."""

    stage = AssemblyStage.DESCRIPTOR_ASSEMBLY

    def __init__(
        self,
        partition_path: str,
        reason: str,
        destination: Optional[str] = None
    ) -> None:
        super().__init__(
            f"while calling stat on partition file {partition_path}: {reason}",
            destination=destination
        )
        self.partition_path = partition_path
        self.reason = reason


class ContainerWriteError(AssemblyDomainError):
    """Container file could not be created."""

    stage = AssemblyStage.CONTAINER_WRITE

    def __init__(self, destination: str, reason: str) -> None:
        super().__init__(
            f"while creating container {destination}: {reason}",
            destination=destination
        )
        self.reason = reason


class ContainerFinalizeError(AssemblyDomainError):
    """Container file could not be committed to its destination."""

    stage = AssemblyStage.CONTAINER_FINALIZE

    def __init__(self, destination: str, reason: str) -> None:
        super().__init__(
            f"while unloading container {destination}: {reason}",
            destination=destination
        )
        self.reason = reason


class ContainerStateError(AssemblyDomainError):
    """Operation attempted on a container handle in a terminal state."""

    stage = AssemblyStage.CONTAINER_FINALIZE

    def __init__(self, container_id: str, state: str, destination: Optional[str] = None) -> None:
        """Initialize container state error.

        Args:
            container_id: Identifier of the container.
            state: Current terminal state of the handle.
            destination: Optional image destination path.
        """
        super().__init__(
            f"Cannot operate on container {container_id} in terminal state: {state}",
            destination=destination
        )
        self.container_id = container_id
        self.state = state


class OwnershipChangeError(AssemblyDomainError):
    """Ownership of the finished image could not be changed."""

    stage = AssemblyStage.OWNERSHIP

    def __init__(self, destination: str, uid: int, gid: int, reason: str) -> None:
        super().__init__(
            f"while changing image ownership of {destination} to {uid}:{gid}: {reason}",
            destination=destination
        )
        self.uid = uid
        self.gid = gid
        self.reason = reason
