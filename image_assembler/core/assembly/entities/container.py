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

"""Container creation request and handle lifecycle."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from ..exceptions import ContainerStateError
from ..value_objects import HDR_LAUNCH, HDR_VERSION, ContainerId, ContainerState
from .descriptor import ObjectDescriptor


@dataclass(frozen=True)
class CreateInfo:
    """Everything the container writer needs to create an image.

    Attributes:
        destination: Final image path.
        container_id: Fresh identifier of the image.
        descriptors: Ordered descriptors to serialize.
        launch: Launch script written at the top of the file.
        version: Format version.
    """

    destination: str
    container_id: ContainerId
    descriptors: List[ObjectDescriptor] = field(default_factory=list)
    launch: str = HDR_LAUNCH
    version: str = HDR_VERSION


@dataclass
class ContainerHandle:
    """Lifecycle of a container between creation and commit.

    Starts OPEN once the writer has built the image. ``finalize`` moves it
    to FINALIZED after the image is committed at its destination, ``fail``
    moves it to FAILED. Both are terminal.

    Attributes:
        container_id: Identifier of the image.
        destination: Final image path.
        state: Current lifecycle state.
        failure_reason: Error description if failed.
        finalized_at: Commit timestamp.
    """

    container_id: ContainerId
    destination: str
    state: ContainerState = ContainerState.OPEN
    failure_reason: Optional[str] = None
    finalized_at: Optional[datetime] = None

    def ensure_open(self) -> None:
        """Raise unless the handle still accepts operations.

        Raises:
            ContainerStateError: If in a terminal state.
        """
        if self.state.is_terminal():
            raise ContainerStateError(
                container_id=str(self.container_id),
                state=self.state.value,
                destination=self.destination,
            )

    def finalize(self) -> None:
        """Transition from OPEN to FINALIZED.

        Raises:
            ContainerStateError: If already in a terminal state.
        """
        self.ensure_open()
        self.state = ContainerState.FINALIZED
        self.finalized_at = datetime.now(timezone.utc)

    def fail(self, reason: str) -> None:
        """Transition from OPEN to FAILED with the failure reason.

        Raises:
            ContainerStateError: If already in a terminal state.
        """
        self.ensure_open()
        self.state = ContainerState.FAILED
        self.failure_reason = reason
