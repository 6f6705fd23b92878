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

"""Unit tests for shared filesystem helpers."""

import pytest

from image_assembler.fileops import remove_quietly


@pytest.mark.unit
class TestRemoveQuietly:
    """Tests for remove_quietly."""

    def test_removes_file(self, tmp_path) -> None:
        """An existing file is deleted."""
        path = tmp_path / "squashfs-1"
        path.write_bytes(b"data")

        remove_quietly(str(path))

        assert not path.exists()

    def test_missing_file(self, tmp_path) -> None:
        """A file that is already gone is not an error."""
        remove_quietly(str(tmp_path / "gone"))

    def test_directory_still_raises(self, tmp_path) -> None:
        """Only a missing path is ignored."""
        with pytest.raises(OSError):
            remove_quietly(str(tmp_path))
