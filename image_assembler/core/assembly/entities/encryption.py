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

"""Ephemeral encryption state of a single assembly."""

from dataclasses import dataclass, field
from typing import Optional

from ..value_objects import KeyInfo


@dataclass
class EncryptionContext:
    """Key material held while one image is assembled.

    Never persisted. ``discard`` drops the plaintext once the wrapped key
    has been embedded.

    Attributes:
        key_info: Key specification from the build options.
        plaintext: Symmetric key used to encrypt the partition.
        wrapped_key: Recipient-wrapped key, None when nothing was wrapped.
    """

    key_info: KeyInfo
    plaintext: bytes = field(repr=False)
    wrapped_key: Optional[bytes] = field(default=None, repr=False)

    @property
    def has_wrapped_key(self) -> bool:
        return bool(self.wrapped_key)

    def discard(self) -> None:
        self.plaintext = b""
