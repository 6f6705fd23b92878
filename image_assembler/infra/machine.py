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

"""Target architecture detection from ELF binaries of a root filesystem."""

import logging
import os
import platform
import struct
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)

ELF_MAGIC = b"\x7fELF"
ELFCLASS32 = 1
ELFCLASS64 = 2
ELFDATA2LSB = 1
ELFDATA2MSB = 2

EM_MIPS = 8
EM_PPC64 = 21
EM_S390 = 22
EM_386 = 3
EM_ARM = 40
EM_X86_64 = 62
EM_AARCH64 = 183
EM_RISCV = 243

PROBE_PATHS = (
    "/bin/sh",
    "/bin/bash",
    "/bin/busybox",
    "/usr/bin/env",
    "/bin/ls",
    "/usr/bin/ls",
    "/sbin/init",
)

MAX_SYMLINKS = 40

_HOST_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "mips": "mips",
    "mipsel": "mipsle",
    "mips64": "mips64",
    "mips64el": "mips64le",
    "riscv64": "riscv64",
}


def host_architecture() -> str:
    """Return the canonical architecture tag of the build host."""
    machine = platform.machine().lower()
    if machine in _HOST_ARCH_ALIASES:
        return _HOST_ARCH_ALIASES[machine]
    if machine.startswith("arm"):
        return "arm"
    return machine


def _elf_arch(elf_class: int, elf_data: int, machine: int) -> str:
    little = elf_data == ELFDATA2LSB
    if machine == EM_386 and elf_class == ELFCLASS32:
        return "386"
    if machine == EM_X86_64 and elf_class == ELFCLASS64:
        return "amd64"
    if machine == EM_ARM and elf_class == ELFCLASS32:
        return "arm"
    if machine == EM_AARCH64 and elf_class == ELFCLASS64:
        return "arm64"
    if machine == EM_PPC64 and elf_class == ELFCLASS64:
        return "ppc64le" if little else "ppc64"
    if machine == EM_MIPS:
        base = "mips64" if elf_class == ELFCLASS64 else "mips"
        return f"{base}le" if little else base
    if machine == EM_S390 and elf_class == ELFCLASS64:
        return "s390x"
    if machine == EM_RISCV and elf_class == ELFCLASS64:
        return "riscv64"
    return ""


def arch_from_elf(path: str) -> str:
    """Return the architecture tag of an ELF file, "" if unknown.

    Args:
        path: File to inspect.
    """
    try:
        with open(path, "rb") as f:
            header = f.read(20)
    except OSError:
        return ""

    if len(header) < 20 or header[:4] != ELF_MAGIC:
        return ""

    elf_class = header[4]
    elf_data = header[5]
    if elf_data == ELFDATA2LSB:
        (machine,) = struct.unpack_from("<H", header, 18)
    elif elf_data == ELFDATA2MSB:
        (machine,) = struct.unpack_from(">H", header, 18)
    else:
        return ""

    return _elf_arch(elf_class, elf_data, machine)


def resolve_in_root(root: str, path: str) -> Optional[str]:
    """Resolve path as if root were "/", following symlinks inside root.

    Absolute link targets restart at root and ".." never climbs above it.

    Returns:
        Host path, or None on a symlink loop.
    """
    parts = [p for p in path.split("/") if p]
    resolved = []
    links = 0
    while parts:
        part = parts.pop(0)
        if part == ".":
            continue
        if part == "..":
            if resolved:
                resolved.pop()
            continue
        candidate = os.path.join(root, *resolved, part)
        if os.path.islink(candidate):
            links += 1
            if links > MAX_SYMLINKS:
                return None
            target = os.readlink(candidate)
            if target.startswith("/"):
                resolved = []
            parts = [p for p in target.split("/") if p] + parts
            continue
        resolved.append(part)
    return os.path.join(root, *resolved)


class ElfArchitectureResolver:
    """ArchitectureResolver port reading ELF headers of well-known binaries."""

    def __init__(
        self,
        probe_paths: Sequence[str] = PROBE_PATHS,
        host_arch: Callable[[], str] = host_architecture,
    ) -> None:
        self._probe_paths = probe_paths
        self._host_arch = host_arch

    def detect(self, rootfs_path: str) -> str:
        """Return the detected architecture of a root filesystem, "" if none."""
        for probe in self._probe_paths:
            target = resolve_in_root(rootfs_path, probe)
            if target is None or not os.path.isfile(target):
                continue
            arch = arch_from_elf(target)
            if arch:
                logger.debug("Detected architecture %s from %s", arch, probe)
                return arch
        return ""

    def resolve(self, rootfs_path: str) -> str:
        """Return the target architecture, falling back to the host's."""
        arch = self.detect(rootfs_path)
        if not arch:
            logger.info("Architecture not recognized, use native")
            arch = self._host_arch()
        logger.info("Set SIF container architecture to %s", arch)
        return arch
