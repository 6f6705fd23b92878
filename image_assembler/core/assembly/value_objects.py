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

"""Value objects for the image assembly domain.

All value objects are immutable and defined by their values, not identity.
Numeric codes follow the SIF v1 on-disk format.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import ClassVar, Dict, Optional


DESCR_GROUP_MASK = 0xF0000000
DESCR_DEFAULT_GROUP = DESCR_GROUP_MASK | 1
DESCR_UNUSED_LINK = 0

HDR_LAUNCH = "#!/usr/bin/env run-singularity\n"
HDR_MAGIC = "SIF_MAGIC"
HDR_VERSION = "01"

HDR_ARCH_UNKNOWN = "00"

SIF_ARCH_CODES: Dict[str, str] = {
    "386": "01",
    "amd64": "02",
    "arm": "03",
    "arm64": "04",
    "ppc64": "05",
    "ppc64le": "06",
    "mips": "07",
    "mipsle": "08",
    "mips64": "09",
    "mips64le": "10",
    "s390x": "11",
}


def get_sif_arch(arch: str) -> str:
    """Return the SIF header code for an architecture tag.

    Args:
        arch: Canonical architecture tag (e.g. "amd64").

    Returns:
        Two-digit SIF architecture code, "00" when unknown.
    """
    return SIF_ARCH_CODES.get(arch, HDR_ARCH_UNKNOWN)


class DataType(IntEnum):
    """Data object types stored in a SIF descriptor."""

    DEFFILE = 0x4001
    ENV_VAR = 0x4002
    LABELS = 0x4003
    PARTITION = 0x4004
    SIGNATURE = 0x4005
    GENERIC_JSON = 0x4006
    GENERIC = 0x4007
    CRYPTO_MESSAGE = 0x4008


class FsType(IntEnum):
    """Filesystem types of a partition data object."""

    SQUASHFS = 1
    EXT3 = 2
    IMMUTABLE_OBJECT = 3
    RAW = 4
    ENCRYPTED_SQUASHFS = 5


class PartType(IntEnum):
    """Partition roles."""

    SYSTEM = 1
    PRIMSYS = 2
    DATA = 3
    OVERLAY = 4


class FormatType(IntEnum):
    """Crypto message formats."""

    OPENPGP = 1
    PEM = 2


class MessageType(IntEnum):
    """Crypto message types."""

    CLEAR_SIGNATURE = 0x100
    RSA_OAEP = 0x200


class AssemblyStage(str, Enum):
    """Pipeline stages used to label failures."""

    IDENTIFIER_GENERATION = "identifier-generation"
    PARTITION_BUILD = "partition-build"
    KEY_DERIVATION = "key-derivation"
    FILESYSTEM_ENCRYPTION = "filesystem-encryption"
    KEY_WRAP = "key-wrap"
    DESCRIPTOR_ASSEMBLY = "descriptor-assembly"
    CONTAINER_WRITE = "container-write"
    CONTAINER_FINALIZE = "container-finalize"
    OWNERSHIP = "ownership"


class ContainerState(str, Enum):
    """Container handle lifecycle states.

    Terminal states (FINALIZED, FAILED) cannot transition.
    """

    OPEN = "OPEN"
    FINALIZED = "FINALIZED"
    FAILED = "FAILED"

    def is_terminal(self) -> bool:
        """Check if state is terminal.

        Returns:
            True if state is FINALIZED or FAILED.
        """
        return self in {ContainerState.FINALIZED, ContainerState.FAILED}


@dataclass(frozen=True)
class ContainerId:
    """UUID v4 identifier of a container image.

    Attributes:
        value: String representation of UUID v4.

    Raises:
        ValueError: If value does not match UUID v4 pattern or exceeds length.
    """

    value: str

    UUID_V4_PATTERN: ClassVar[str] = (
        r'^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$'
    )
    MAX_LENGTH: ClassVar[int] = 36

    def __post_init__(self) -> None:
        """Validate UUID v4 format and length."""
        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(
                f"ContainerId length cannot exceed {self.MAX_LENGTH} characters, "
                f"got {len(self.value)}"
            )
        if not re.match(self.UUID_V4_PATTERN, self.value.lower()):
            raise ValueError(f"Invalid UUID v4 format: {self.value}")

    @property
    def bytes(self) -> bytes:
        """Return the 16 raw bytes of the identifier."""
        return bytes.fromhex(self.value.replace("-", ""))

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


class KeyFormat(str, Enum):
    """Supported encryption key specifications."""

    PASSPHRASE = "passphrase"
    PEM = "pem"


@dataclass(frozen=True)
class KeyInfo:
    """Encryption key specification supplied with a build.

    Attributes:
        format: How the plaintext key is obtained and wrapped.
        material: Passphrase, for PASSPHRASE keys. Never shown in repr.
        path: Recipient PEM public key or certificate, for PEM keys.

    Raises:
        ValueError: If the attributes required by the format are missing.
    """

    format: KeyFormat
    material: Optional[str] = field(default=None, repr=False)
    path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate attributes against the key format."""
        if self.format == KeyFormat.PASSPHRASE and self.material is None:
            raise ValueError("Passphrase key requires material")
        if self.format == KeyFormat.PEM and not self.path:
            raise ValueError("PEM key requires a public key path")
