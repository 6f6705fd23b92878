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

"""Unit tests for ELF based architecture detection."""

import logging
import os
from unittest.mock import patch

import pytest

from image_assembler.infra.machine import (
    ElfArchitectureResolver,
    arch_from_elf,
    host_architecture,
    resolve_in_root,
)
from tests.utils import write_elf_stub


class TestArchFromElf:
    """Tests for ELF header decoding."""

    @pytest.mark.parametrize("elf_class,elf_data,machine,expected", [
        (2, 1, 62, "amd64"),
        (1, 1, 3, "386"),
        (1, 1, 40, "arm"),
        (2, 1, 183, "arm64"),
        (2, 1, 21, "ppc64le"),
        (2, 2, 21, "ppc64"),
        (1, 2, 8, "mips"),
        (1, 1, 8, "mipsle"),
        (2, 2, 8, "mips64"),
        (2, 1, 8, "mips64le"),
        (2, 2, 22, "s390x"),
    ])
    def test_known_machines(self, tmp_path, elf_class, elf_data, machine, expected) -> None:
        """Machine, class and byte order map to a canonical tag."""
        path = tmp_path / "bin"
        write_elf_stub(path, elf_class, elf_data, machine)

        assert arch_from_elf(str(path)) == expected

    def test_unknown_machine(self, tmp_path) -> None:
        """Unsupported machines are not recognized."""
        path = tmp_path / "bin"
        write_elf_stub(path, 2, 1, 0x9026)

        assert arch_from_elf(str(path)) == ""

    def test_not_elf(self, tmp_path) -> None:
        """Scripts and other files are not recognized."""
        path = tmp_path / "script"
        path.write_text("#!/bin/sh\necho hello world\n")

        assert arch_from_elf(str(path)) == ""

    def test_truncated_header(self, tmp_path) -> None:
        """Files shorter than the header are not recognized."""
        path = tmp_path / "short"
        path.write_bytes(b"\x7fELF\x02\x01")

        assert arch_from_elf(str(path)) == ""

    def test_missing_file(self, tmp_path) -> None:
        """Missing files are not recognized."""
        assert arch_from_elf(str(tmp_path / "missing")) == ""


class TestResolveInRoot:
    """Tests for symlink resolution confined to a root filesystem."""

    def test_absolute_link_stays_in_root(self, rootfs) -> None:
        """Absolute link targets resolve against the root, not the host."""
        write_elf_stub(rootfs / "bin" / "busybox", 2, 1, 183)
        os.symlink("/bin/busybox", rootfs / "bin" / "sh")

        assert resolve_in_root(str(rootfs), "/bin/sh") == os.path.join(str(rootfs), "bin", "busybox")

    def test_relative_link(self, rootfs) -> None:
        """Relative link targets resolve from the link directory."""
        (rootfs / "usr" / "bin").mkdir(parents=True)
        write_elf_stub(rootfs / "usr" / "bin" / "bash", 2, 1, 62)
        os.symlink("../usr/bin/bash", rootfs / "bin" / "bash")

        assert resolve_in_root(str(rootfs), "/bin/bash") == os.path.join(
            str(rootfs), "usr", "bin", "bash"
        )

    def test_parent_never_escapes_root(self, rootfs) -> None:
        """Leading ".." components stop at the root."""
        assert resolve_in_root(str(rootfs), "/../../etc/passwd") == os.path.join(
            str(rootfs), "etc", "passwd"
        )

    def test_symlink_loop(self, rootfs) -> None:
        """Symlink loops resolve to None."""
        os.symlink("/bin/b", rootfs / "bin" / "a")
        os.symlink("/bin/a", rootfs / "bin" / "b")

        assert resolve_in_root(str(rootfs), "/bin/a") is None


class TestHostArchitecture:
    """Tests for host architecture naming."""

    @pytest.mark.parametrize("machine,expected", [
        ("x86_64", "amd64"),
        ("AMD64", "amd64"),
        ("i686", "386"),
        ("aarch64", "arm64"),
        ("armv7l", "arm"),
        ("ppc64le", "ppc64le"),
        ("s390x", "s390x"),
    ])
    def test_aliases(self, machine, expected) -> None:
        """Platform machine names map to canonical tags."""
        with patch("image_assembler.infra.machine.platform.machine", return_value=machine):
            assert host_architecture() == expected


class TestElfArchitectureResolver:
    """Tests for ElfArchitectureResolver."""

    def test_detects_from_first_probe(self, rootfs) -> None:
        """The first recognized probe decides the architecture."""
        write_elf_stub(rootfs / "bin" / "sh", 2, 1, 183)
        resolver = ElfArchitectureResolver(host_arch=lambda: "amd64")

        assert resolver.resolve(str(rootfs)) == "arm64"

    def test_follows_busybox_symlink(self, rootfs) -> None:
        """Probes that are symlinks are followed inside the root."""
        write_elf_stub(rootfs / "bin" / "busybox", 1, 1, 40)
        os.symlink("/bin/busybox", rootfs / "bin" / "sh")
        resolver = ElfArchitectureResolver(host_arch=lambda: "amd64")

        assert resolver.resolve(str(rootfs)) == "arm"

    def test_skips_unrecognized_probe(self, rootfs) -> None:
        """A script at the first probe does not stop detection."""
        (rootfs / "bin" / "sh").write_text("#!/bin/busybox sh\n")
        write_elf_stub(rootfs / "bin" / "bash", 2, 2, 22)
        resolver = ElfArchitectureResolver(host_arch=lambda: "amd64")

        assert resolver.resolve(str(rootfs)) == "s390x"

    def test_falls_back_to_host(self, rootfs, caplog) -> None:
        """An empty root filesystem uses the host architecture."""
        resolver = ElfArchitectureResolver(host_arch=lambda: "ppc64le")

        with caplog.at_level(logging.INFO):
            arch = resolver.resolve(str(rootfs))

        assert arch == "ppc64le"
        assert "Architecture not recognized, use native" in caplog.text
        assert "Set SIF container architecture to ppc64le" in caplog.text

    def test_fallback_is_stable(self, rootfs) -> None:
        """Repeated resolution gives the same answer."""
        resolver = ElfArchitectureResolver(host_arch=lambda: "amd64")

        assert resolver.resolve(str(rootfs)) == resolver.resolve(str(rootfs))

    def test_symlink_loop_falls_back(self, rootfs) -> None:
        """Looping probes are skipped."""
        os.symlink("/bin/sh", rootfs / "bin" / "sh")
        resolver = ElfArchitectureResolver(probe_paths=("/bin/sh",), host_arch=lambda: "386")

        assert resolver.resolve(str(rootfs)) == "386"
