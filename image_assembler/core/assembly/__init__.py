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

"""Image assembly domain module."""

from .entities import (
    AssembledDescriptors,
    BuildBundle,
    BuildOptions,
    ContainerHandle,
    CreateInfo,
    EncryptionContext,
    ObjectDescriptor,
)
from .exceptions import (
    AssemblyDomainError,
    ContainerFinalizeError,
    ContainerStateError,
    ContainerWriteError,
    FilesystemEncryptionError,
    IdentifierGenerationError,
    KeyDerivationError,
    KeyWrapError,
    OwnershipChangeError,
    PartitionBuildError,
    PartitionOpenError,
    PartitionStatError,
)
from .ports import (
    ArchitectureResolver,
    ContainerIdGenerator,
    ContainerImage,
    ContainerWriter,
    FilesystemEncryptor,
    KeyService,
    OwnershipFinalizer,
    PartitionBuilder,
)
from .services import DescriptorAssembler, OwnershipPolicy, PartitionFlagsService
from .value_objects import (
    AssemblyStage,
    ContainerId,
    ContainerState,
    DataType,
    FsType,
    KeyFormat,
    KeyInfo,
)

__all__ = [
    "AssembledDescriptors",
    "BuildBundle",
    "BuildOptions",
    "ContainerHandle",
    "CreateInfo",
    "EncryptionContext",
    "ObjectDescriptor",
    "AssemblyDomainError",
    "ContainerFinalizeError",
    "ContainerStateError",
    "ContainerWriteError",
    "FilesystemEncryptionError",
    "IdentifierGenerationError",
    "KeyDerivationError",
    "KeyWrapError",
    "OwnershipChangeError",
    "PartitionBuildError",
    "PartitionOpenError",
    "PartitionStatError",
    "ArchitectureResolver",
    "ContainerIdGenerator",
    "ContainerImage",
    "ContainerWriter",
    "FilesystemEncryptor",
    "KeyService",
    "OwnershipFinalizer",
    "PartitionBuilder",
    "DescriptorAssembler",
    "OwnershipPolicy",
    "PartitionFlagsService",
    "AssemblyStage",
    "ContainerId",
    "ContainerState",
    "DataType",
    "FsType",
    "KeyFormat",
    "KeyInfo",
]
