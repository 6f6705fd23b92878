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

"""Object descriptor entities embedded in a container."""

import os
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Union

from ..value_objects import (
    DESCR_DEFAULT_GROUP,
    DESCR_UNUSED_LINK,
    DataType,
    FormatType,
    FsType,
    MessageType,
    PartType,
    get_sif_arch,
)


@dataclass(frozen=True)
class PartitionExtra:
    """Partition specific descriptor metadata.

    Attributes:
        fs_type: Filesystem type of the partition.
        part_type: Partition role.
        arch: Two-digit SIF architecture code.
    """

    fs_type: FsType
    part_type: PartType
    arch: str


@dataclass(frozen=True)
class CryptoMessageExtra:
    """Crypto message specific descriptor metadata."""

    format_type: FormatType
    message_type: MessageType


@dataclass
class ObjectDescriptor:
    """Single data object to embed in a container.

    Exactly one of ``data`` and ``fp`` carries the content.

    Attributes:
        data_type: SIF data object type.
        size: Content length in bytes.
        group_id: Descriptor group.
        link: 1-based id of a linked descriptor, or unused.
        name: Descriptor name.
        data: Inline content.
        fp: Open binary file holding the content.
        extra: Type specific metadata.
    """

    data_type: DataType
    size: int
    group_id: int = DESCR_DEFAULT_GROUP
    link: int = DESCR_UNUSED_LINK
    name: str = ""
    data: Optional[bytes] = field(default=None, repr=False)
    fp: Optional[BinaryIO] = field(default=None, repr=False)
    extra: Optional[Union[PartitionExtra, CryptoMessageExtra]] = None

    @classmethod
    def definition_file(cls, recipe: bytes) -> "ObjectDescriptor":
        """Build the definition file descriptor, empty recipes included."""
        return cls(data_type=DataType.DEFFILE, size=len(recipe), data=recipe)

    @classmethod
    def metadata_object(cls, name: str, data: bytes) -> "ObjectDescriptor":
        """Build a generic JSON descriptor."""
        return cls(
            data_type=DataType.GENERIC_JSON,
            size=len(data),
            name=name,
            data=data,
        )

    @classmethod
    def filesystem_partition(
        cls,
        path: str,
        fp: BinaryIO,
        size: int,
        arch: str,
        encrypted: bool = False,
    ) -> "ObjectDescriptor":
        """Build the primary system partition descriptor.

        Args:
            path: Partition file path, its basename becomes the name.
            fp: Open partition file.
            size: Partition size in bytes.
            arch: Canonical architecture tag.
            encrypted: True if the partition is an encrypted squashfs.
        """
        fs_type = FsType.ENCRYPTED_SQUASHFS if encrypted else FsType.SQUASHFS
        return cls(
            data_type=DataType.PARTITION,
            size=size,
            name=os.path.basename(path),
            fp=fp,
            extra=PartitionExtra(
                fs_type=fs_type,
                part_type=PartType.PRIMSYS,
                arch=get_sif_arch(arch),
            ),
        )

    @classmethod
    def encryption_key_blob(cls, wrapped_key: bytes, partition_id: int) -> "ObjectDescriptor":
        """Build the crypto message descriptor unlocking a partition.

        Args:
            wrapped_key: PEM encoded RSA-OAEP wrapped key.
            partition_id: 1-based id of the partition descriptor.
        """
        return cls(
            data_type=DataType.CRYPTO_MESSAGE,
            size=len(wrapped_key),
            link=partition_id,
            data=wrapped_key,
            extra=CryptoMessageExtra(
                format_type=FormatType.PEM,
                message_type=MessageType.RSA_OAEP,
            ),
        )


@dataclass
class AssembledDescriptors:
    """Ordered descriptors plus the partition file they hold open.

    Use as a context manager; the partition file is closed on exit.
    """

    descriptors: List[ObjectDescriptor]
    partition_file: BinaryIO

    def close(self) -> None:
        self.partition_file.close()

    def __enter__(self) -> "AssembledDescriptors":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def find(self, data_type: DataType) -> List[ObjectDescriptor]:
        """Return descriptors of the given type, in order."""
        return [d for d in self.descriptors if d.data_type == data_type]
