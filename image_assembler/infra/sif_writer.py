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

"""SIF v1 container writer.

File layout (little endian, packed):

    0       global header (128 bytes)
    4096    descriptor table, DESCR_NUM_ENTRIES entries of 585 bytes
    32176   data objects in descriptor order, partitions page aligned

The image is written to a temporary file beside the destination and only
renamed into place by ``SIFContainer.unload``.
"""

import logging
import os
import struct
import tempfile
import time
from typing import BinaryIO, Callable, Optional, Union

from image_assembler.core.assembly.entities import (
    ContainerHandle,
    CreateInfo,
    CryptoMessageExtra,
    ObjectDescriptor,
    PartitionExtra,
)
from image_assembler.core.assembly.exceptions import (
    ContainerFinalizeError,
    ContainerWriteError,
)
from image_assembler.core.assembly.value_objects import (
    HDR_ARCH_UNKNOWN,
    HDR_MAGIC,
    DataType,
    PartType,
)
from image_assembler.fileops import remove_quietly

logger = logging.getLogger(__name__)

HEADER_FORMAT = "<32s10s3s3s16s8q"
DESCRIPTOR_FORMAT = "<i?III7q128s384s"
PARTITION_EXTRA_FORMAT = "<ii3s"
CRYPTO_MESSAGE_EXTRA_FORMAT = "<ii"

HEADER_LEN = struct.calcsize(HEADER_FORMAT)
DESCR_ENTRY_LEN = struct.calcsize(DESCRIPTOR_FORMAT)
DESCR_NUM_ENTRIES = 48
DESCR_START_OFFSET = 4096
DATA_START_OFFSET = DESCR_START_OFFSET + DESCR_ENTRY_LEN * DESCR_NUM_ENTRIES
PAGE_SIZE = 4096
COPY_CHUNK_SIZE = 1024 * 1024
IMAGE_MODE = 0o755


def _align(offset: int, alignment: int) -> int:
    return (offset + alignment - 1) // alignment * alignment


def _pack_extra(extra: Optional[Union[PartitionExtra, CryptoMessageExtra]]) -> bytes:
    if isinstance(extra, PartitionExtra):
        return struct.pack(
            PARTITION_EXTRA_FORMAT,
            int(extra.fs_type),
            int(extra.part_type),
            extra.arch.encode("ascii"),
        )
    if isinstance(extra, CryptoMessageExtra):
        return struct.pack(
            CRYPTO_MESSAGE_EXTRA_FORMAT,
            int(extra.format_type),
            int(extra.message_type),
        )
    return b""


class SIFContainer:
    """Image written to a temporary file, awaiting ``unload``."""

    def __init__(self, handle: ContainerHandle, temp_path: str, size: int) -> None:
        self.handle = handle
        self.temp_path = temp_path
        self.size = size

    def unload(self) -> None:
        """Commit the image by renaming it onto its destination.

        Raises:
            ContainerStateError: If the handle is FINALIZED or FAILED.
            ContainerFinalizeError: If the rename fails.
        """
        self.handle.ensure_open()
        destination = self.handle.destination
        try:
            os.replace(self.temp_path, destination)
        except OSError as exc:
            remove_quietly(self.temp_path)
            self.handle.fail(str(exc))
            raise ContainerFinalizeError(destination, str(exc)) from exc

        self.handle.finalize()
        logger.info("SIF image %s committed at %s", self.handle.container_id, destination)

    def discard(self) -> None:
        """Drop an uncommitted image."""
        self.handle.ensure_open()
        remove_quietly(self.temp_path)
        self.handle.fail("discarded")


class SIFContainerWriter:
    """ContainerWriter port producing SIF v1 images."""

    def __init__(self, clock: Callable[[], float] = time.time, alignment: int = PAGE_SIZE) -> None:
        """Initialize the writer.

        Args:
            clock: Source of the creation timestamp.
            alignment: Alignment of partition data objects.
        """
        self._clock = clock
        self._alignment = alignment

    def create(self, info: CreateInfo) -> SIFContainer:
        """Serialize descriptors into a temporary image file.

        Args:
            info: Destination, identifier and ordered descriptors.

        Returns:
            SIFContainer whose handle is OPEN.

        Raises:
            ContainerWriteError: On too many descriptors or any I/O failure.
        """
        if len(info.descriptors) > DESCR_NUM_ENTRIES:
            raise ContainerWriteError(
                info.destination,
                f"{len(info.descriptors)} descriptors exceed the table size of {DESCR_NUM_ENTRIES}",
            )

        dest_dir = os.path.dirname(os.path.abspath(info.destination))
        try:
            fd, temp_path = tempfile.mkstemp(prefix=".sif-", suffix=".tmp", dir=dest_dir)
        except OSError as exc:
            raise ContainerWriteError(info.destination, str(exc)) from exc

        handle = ContainerHandle(container_id=info.container_id, destination=info.destination)
        try:
            with os.fdopen(fd, "w+b") as f:
                self._write(f, info)
                f.flush()
                os.fsync(f.fileno())
                size = os.fstat(f.fileno()).st_size
            os.chmod(temp_path, IMAGE_MODE)
        except (OSError, ValueError, struct.error) as exc:
            remove_quietly(temp_path)
            handle.fail(str(exc))
            logger.error("Failed to write SIF image for %s: %s", info.destination, exc)
            raise ContainerWriteError(info.destination, str(exc)) from exc

        logger.debug("SIF image %s written to %s", info.container_id, temp_path)
        return SIFContainer(handle, temp_path, size)

    def _write(self, f: BinaryIO, info: CreateInfo) -> None:
        now = int(self._clock())
        uid = os.getuid()
        gid = os.getgid()
        arch = HDR_ARCH_UNKNOWN

        entries = []
        offset = DATA_START_OFFSET
        for descr_id, descr in enumerate(info.descriptors, start=1):
            alignment = self._alignment if descr.data_type == DataType.PARTITION else 1
            fileoff = _align(offset, alignment)
            f.seek(fileoff)
            written = self._write_data(f, descr)
            if written != descr.size:
                raise ValueError(
                    f"descriptor {descr_id} holds {written} bytes, expected {descr.size}"
                )

            entries.append(struct.pack(
                DESCRIPTOR_FORMAT,
                int(descr.data_type),
                True,
                descr_id,
                descr.group_id,
                descr.link,
                fileoff,
                descr.size,
                fileoff - offset + descr.size,
                now,
                now,
                uid,
                gid,
                descr.name.encode("utf-8"),
                _pack_extra(descr.extra),
            ))

            if isinstance(descr.extra, PartitionExtra) and descr.extra.part_type == PartType.PRIMSYS:
                arch = descr.extra.arch
            offset = fileoff + descr.size

        f.seek(DESCR_START_OFFSET)
        for entry in entries:
            f.write(entry)
        f.write(b"\0" * DESCR_ENTRY_LEN * (DESCR_NUM_ENTRIES - len(entries)))

        f.seek(0)
        f.write(struct.pack(
            HEADER_FORMAT,
            info.launch.encode("ascii"),
            HDR_MAGIC.encode("ascii"),
            info.version.encode("ascii"),
            arch.encode("ascii"),
            info.container_id.bytes,
            now,
            now,
            DESCR_NUM_ENTRIES - len(entries),
            DESCR_NUM_ENTRIES,
            DESCR_START_OFFSET,
            DESCR_ENTRY_LEN * DESCR_NUM_ENTRIES,
            DATA_START_OFFSET,
            offset - DATA_START_OFFSET,
        ))
        f.truncate(offset)

    @staticmethod
    def _write_data(f: BinaryIO, descr: ObjectDescriptor) -> int:
        if descr.data is not None:
            return f.write(descr.data)

        if descr.fp is None:
            raise ValueError(f"descriptor {descr.name!r} has no content")

        descr.fp.seek(0)
        copied = 0
        while True:
            chunk = descr.fp.read(COPY_CHUNK_SIZE)
            if not chunk:
                break
            f.write(chunk)
            copied += len(chunk)
        return copied
