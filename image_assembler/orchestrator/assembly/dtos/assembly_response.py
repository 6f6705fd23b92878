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

"""Assembly response DTO."""

from dataclasses import dataclass
from typing import Optional, Tuple

from image_assembler.core.assembly.entities import ContainerHandle


@dataclass(frozen=True)
class AssemblyResponse:
    """Response DTO for a finished image assembly.

    Attributes:
        destination: Path of the committed image.
        container_id: Image identifier.
        arch: Architecture tag of the system partition.
        encrypted: True if the partition is encrypted.
        key_embedded: True if a wrapped key was embedded.
        descriptor_count: Number of data objects in the image.
        size: Image size in bytes.
        finalized_at: Commit timestamp (ISO 8601).
        owner: (uid, gid) applied after a sudo build, else None.
    """

    destination: str
    container_id: str
    arch: str
    encrypted: bool
    key_embedded: bool
    descriptor_count: int
    size: int
    finalized_at: str
    owner: Optional[Tuple[int, int]] = None

    @staticmethod
    def from_handle(
        handle: ContainerHandle,
        arch: str,
        encrypted: bool,
        key_embedded: bool,
        descriptor_count: int,
        size: int,
        owner: Optional[Tuple[int, int]] = None,
    ) -> "AssemblyResponse":
        """Create response DTO from a finalized container handle."""
        return AssemblyResponse(
            destination=handle.destination,
            container_id=str(handle.container_id),
            arch=arch,
            encrypted=encrypted,
            key_embedded=key_embedded,
            descriptor_count=descriptor_count,
            size=size,
            finalized_at=handle.finalized_at.isoformat() if handle.finalized_at else "",
            owner=owner,
        )
