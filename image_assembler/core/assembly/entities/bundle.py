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

"""Build bundle entity handed to the assembler."""

import tempfile
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from ..value_objects import KeyInfo


@dataclass(frozen=True)
class BuildOptions:
    """Options of a build that affect assembly.

    Attributes:
        encryption_key_info: Key specification, None for a plain image.
    """

    encryption_key_info: Optional[KeyInfo] = None

    @property
    def encrypted(self) -> bool:
        """True if the build requested an encrypted partition."""
        return self.encryption_key_info is not None


@dataclass(frozen=True)
class BuildBundle:
    """Prepared root filesystem plus the metadata to embed with it.

    Attributes:
        rootfs_path: Root filesystem directory to compress.
        recipe: Raw definition file bytes (may be empty).
        json_objects: Metadata object name to raw JSON bytes.
        tmp_dir: Scratch directory owned by this build.
        options: Build options.
    """

    rootfs_path: str
    recipe: bytes = b""
    json_objects: Mapping[str, bytes] = field(default_factory=dict)
    tmp_dir: str = field(default_factory=tempfile.gettempdir)
    options: BuildOptions = field(default_factory=BuildOptions)

    def __post_init__(self) -> None:
        if not self.rootfs_path:
            raise ValueError("Bundle rootfs path cannot be empty")
        object.__setattr__(
            self, "json_objects", MappingProxyType(dict(self.json_objects))
        )
