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

"""Domain services for image assembly."""

import logging
import os
import re
from typing import List, Mapping, Optional, Tuple

from .entities import AssembledDescriptors, BuildBundle, ObjectDescriptor
from .exceptions import PartitionOpenError, PartitionStatError

logger = logging.getLogger(__name__)

DEFAULT_OWNER_COMMAND_PATTERN = r"(singularity|apptainer|image-assembler)"

# (uid_t)-1 means "unchanged" to chown
MAX_OWNER_ID = 2**32 - 2
_ID_PATTERN = re.compile(r"\d+", re.ASCII)


class PartitionFlagsService:
    """Domain service deciding the compression tool flags."""

    @staticmethod
    def build_flags(
        is_superuser: bool,
        gzip: bool = False,
        mem: str = "",
        procs: int = 0,
    ) -> List[str]:
        """Return mksquashfs flags for a build.

        Files are forced to root ownership when the build is unprivileged.

        Args:
            is_superuser: True if the build runs as uid 0.
            gzip: Use gzip instead of the tool's default compressor.
            mem: Memory budget, empty for the tool's default.
            procs: Parallelism degree, 0 for the tool's default.

        Returns:
            Ordered flag list.

        Example:
            >>> PartitionFlagsService.build_flags(False, procs=4)
            ['-noappend', '-all-root', '-processors', '4']
        """
        flags = ["-noappend"]
        if not is_superuser:
            flags.append("-all-root")
        if gzip:
            flags.extend(["-comp", "gzip"])
        if mem:
            flags.extend(["-mem", mem])
        if procs:
            flags.extend(["-processors", str(procs)])
        return flags


class DescriptorAssembler:
    """Domain service building the ordered descriptor list of an image.

    Order: definition file, JSON objects sorted by name, system
    partition, then the crypto message linked to the partition.
    """

    @staticmethod
    def assemble(
        bundle: BuildBundle,
        partition_path: str,
        arch: str,
        wrapped_key: Optional[bytes] = None,
        encrypted: bool = False,
    ) -> AssembledDescriptors:
        """Assemble descriptors for a bundle and its partition file.

        The bundle is not modified. The partition file stays open in the
        result until the caller closes it.

        Args:
            bundle: Build bundle.
            partition_path: Final (possibly encrypted) partition file.
            arch: Canonical architecture tag.
            wrapped_key: Wrapped encryption key, if any.
            encrypted: True if the partition was encrypted.

        Returns:
            AssembledDescriptors owning the open partition file.

        Raises:
            PartitionOpenError: If the partition cannot be opened.
            PartitionStatError: If its size cannot be read.
        """
        descriptors = [ObjectDescriptor.definition_file(bundle.recipe)]

        for name in sorted(bundle.json_objects):
            data = bundle.json_objects[name]
            if data:
                descriptors.append(ObjectDescriptor.metadata_object(name, data))

        try:
            fp = open(partition_path, "rb")
        except OSError as exc:
            raise PartitionOpenError(partition_path, str(exc)) from exc

        try:
            size = os.fstat(fp.fileno()).st_size
        except OSError as exc:
            fp.close()
            raise PartitionStatError(partition_path, str(exc)) from exc

        descriptors.append(
            ObjectDescriptor.filesystem_partition(
                partition_path, fp, size, arch, encrypted=encrypted
            )
        )

        if wrapped_key:
            # SIF descriptor ids are 1-based positions
            partition_id = len(descriptors)
            descriptors.append(
                ObjectDescriptor.encryption_key_blob(wrapped_key, partition_id)
            )

        logger.debug(
            "Assembled %d descriptors for %s (arch=%s, encrypted=%s)",
            len(descriptors), partition_path, arch, encrypted
        )
        return AssembledDescriptors(descriptors=descriptors, partition_file=fp)


class OwnershipPolicy:
    """Decides whether a sudo-built image goes back to the invoking user."""

    def __init__(self, command_pattern: str = DEFAULT_OWNER_COMMAND_PATTERN) -> None:
        self._command_pattern = re.compile(command_pattern)

    def resolve_ownership_target(
        self,
        env: Mapping[str, str],
        is_superuser: bool,
    ) -> Optional[Tuple[int, int]]:
        """Return the (uid, gid) the image should belong to, if any.

        Args:
            env: Process environment.
            is_superuser: True if the process runs as uid 0.

        Returns:
            (uid, gid) of the sudo caller, or None to leave ownership alone.
        """
        if not self._command_pattern.search(env.get("SUDO_COMMAND", "")):
            return None

        if not env.get("SUDO_USER") or not is_superuser:
            return None

        raw_uid = env.get("SUDO_UID", "")
        raw_gid = env.get("SUDO_GID", "")
        if not raw_uid or not raw_gid:
            logger.warning(
                "Env vars SUDO_UID or SUDO_GID are not set, won't call chown over built SIF"
            )
            return None

        uid = _parse_id(raw_uid)
        gid = _parse_id(raw_gid)
        if uid is None or gid is None:
            logger.warning(
                "Invalid SUDO_UID/SUDO_GID %r:%r, won't call chown over built SIF",
                raw_uid, raw_gid
            )
            return None

        return uid, gid


def _parse_id(value: str) -> Optional[int]:
    """Parse a decimal uid/gid, None if malformed or outside the id_t range."""
    if not _ID_PATTERN.fullmatch(value):
        return None
    number = int(value)
    if number > MAX_OWNER_ID:
        return None
    return number
