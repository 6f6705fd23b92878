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

"""Infrastructure layer for ContainerId generation."""

import uuid

from image_assembler.core.assembly.exceptions import IdentifierGenerationError
from image_assembler.core.assembly.ports import ContainerIdGenerator
from image_assembler.core.assembly.value_objects import ContainerId


class UUIDv4Generator(ContainerIdGenerator):
    """Random UUID v4 generator for container identifiers.

    A fresh identifier is produced for every image and never reused.
    """

    def generate(self) -> ContainerId:
        """Generate a new UUID v4 ContainerId.

        Returns:
            ContainerId: A new UUID v4 identifier.

        Raises:
            IdentifierGenerationError: If the system random source fails.
        """
        try:
            return ContainerId(str(uuid.uuid4()))
        except ValueError:
            raise
        except Exception as exc:
            raise IdentifierGenerationError(str(exc)) from exc
