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

"""AssembleImage command DTO."""

from dataclasses import dataclass

from image_assembler.core.assembly.entities import BuildBundle


@dataclass(frozen=True)
class AssembleImageCommand:
    """Command to assemble a SIF image from a build bundle.

    Immutable command object representing the intent to assemble an image.
    All validation is performed in the use case layer.

    Attributes:
        bundle: Prepared root filesystem and metadata.
        destination: Path of the image to create.
    """

    bundle: BuildBundle
    destination: str
