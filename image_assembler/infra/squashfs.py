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

"""mksquashfs adapter for the PartitionBuilder port."""

import logging
import subprocess
from typing import List

from image_assembler.core.assembly.exceptions import PartitionBuildError

logger = logging.getLogger(__name__)


class MksquashfsPartitionBuilder:
    """Builds squashfs partitions by running mksquashfs."""

    def __init__(self, mksquashfs_path: str = "mksquashfs") -> None:
        """Initialize the builder.

        Args:
            mksquashfs_path: mksquashfs binary, looked up in PATH if bare.
        """
        self.mksquashfs_path = mksquashfs_path

    def create(self, sources: List[str], dest: str, flags: List[str]) -> None:
        """Compress source directories into dest.

        Args:
            sources: Source directories.
            dest: Partition file to write.
            flags: mksquashfs flags, placed after the destination.

        Raises:
            PartitionBuildError: If mksquashfs cannot run or exits non-zero.
        """
        if not sources:
            raise PartitionBuildError(dest, "no source directory given")

        command = [self.mksquashfs_path, *sources, dest, *flags]
        logger.debug("Running command: %s", " ".join(command))

        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            logger.error("Unable to run %s: %s", self.mksquashfs_path, exc)
            raise PartitionBuildError(dest, f"unable to run {self.mksquashfs_path}: {exc}") from exc

        logger.debug("Return code %s", result.returncode)
        logger.debug("STDOUT:\n%s", result.stdout)
        logger.debug("STDERR:\n%s", result.stderr)

        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            logger.error("mksquashfs failed with exit code %s", result.returncode)
            raise PartitionBuildError(
                dest,
                f"create command failed with exit code {result.returncode}",
                output=output,
            )

        logger.info("Squashfs partition created at %s", dest)
