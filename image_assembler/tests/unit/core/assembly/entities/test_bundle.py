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

"""Unit tests for BuildBundle and EncryptionContext entities."""

import pytest

from image_assembler.core.assembly.entities import (
    BuildBundle,
    BuildOptions,
    EncryptionContext,
)


class TestBuildBundle:
    """Tests for BuildBundle entity."""

    def test_defaults(self):
        """Bundle defaults to an empty recipe and no encryption."""
        bundle = BuildBundle(rootfs_path="/rootfs")
        assert bundle.recipe == b""
        assert dict(bundle.json_objects) == {}
        assert bundle.options.encrypted is False

    def test_empty_rootfs_rejected(self):
        """Rootfs path is required."""
        with pytest.raises(ValueError):
            BuildBundle(rootfs_path="")

    def test_json_objects_read_only(self):
        """Bundle metadata mapping cannot be changed."""
        source = {"labels": b"{}"}
        bundle = BuildBundle(rootfs_path="/rootfs", json_objects=source)
        with pytest.raises(TypeError):
            bundle.json_objects["env"] = b"x"
        source["env"] = b"x"
        assert "env" not in bundle.json_objects

    def test_encrypted_option(self, sample_key_info):
        """Options with a key specification request encryption."""
        options = BuildOptions(encryption_key_info=sample_key_info)
        assert options.encrypted is True


class TestEncryptionContext:
    """Tests for EncryptionContext entity."""

    def test_repr_hides_key_material(self, sample_key_info):
        """Key material never shows up in repr."""
        context = EncryptionContext(key_info=sample_key_info, plaintext=b"topsecretkey")
        assert "topsecretkey" not in repr(context)
        assert "correct horse" not in repr(context)

    def test_discard(self, sample_key_info):
        """Discard drops the plaintext key."""
        context = EncryptionContext(key_info=sample_key_info, plaintext=b"topsecretkey")
        context.discard()
        assert context.plaintext == b""

    def test_has_wrapped_key(self, sample_key_info):
        """Only non-empty wrapped data counts as a key."""
        context = EncryptionContext(key_info=sample_key_info, plaintext=b"k")
        assert not context.has_wrapped_key
        context.wrapped_key = b""
        assert not context.has_wrapped_key
        context.wrapped_key = b"pem"
        assert context.has_wrapped_key
