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

"""Hands a sudo-built image back to the user who ran sudo."""

import logging
import os
from typing import Callable, Mapping, Optional, Tuple

from image_assembler.core.assembly.exceptions import OwnershipChangeError
from image_assembler.core.assembly.services import OwnershipPolicy

logger = logging.getLogger(__name__)


class ChownOwnershipFinalizer:
    """OwnershipFinalizer port applying OwnershipPolicy with chown."""

    def __init__(
        self,
        policy: Optional[OwnershipPolicy] = None,
        environ: Optional[Mapping[str, str]] = None,
        getuid: Callable[[], int] = os.getuid,
        chown: Callable[[str, int, int], None] = os.chown,
    ) -> None:
        """Initialize the finalizer.

        Args:
            policy: Ownership decision, default pattern if None.
            environ: Environment to read, os.environ if None.
            getuid: Returns the real uid of the process.
            chown: Ownership change primitive.
        """
        self._policy = policy or OwnershipPolicy()
        self._environ = environ
        self._getuid = getuid
        self._chown = chown

    def finalize(self, path: str) -> Optional[Tuple[int, int]]:
        """Change ownership of path to the sudo caller when warranted.

        Returns:
            Applied (uid, gid), or None when ownership was left alone.

        Raises:
            OwnershipChangeError: If chown fails or rejects the ids.
        """
        env = os.environ if self._environ is None else self._environ
        target = self._policy.resolve_ownership_target(env, self._getuid() == 0)
        if target is None:
            return None

        uid, gid = target
        try:
            self._chown(path, uid, gid)
        except (OSError, OverflowError) as exc:
            raise OwnershipChangeError(path, uid, gid, str(exc)) from exc

        logger.info("Image %s ownership changed to %d:%d", path, uid, gid)
        return target
