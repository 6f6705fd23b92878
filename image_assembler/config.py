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

"""Assembler configuration.

Loaded from IMAGE_ASSEMBLER_* environment variables or a YAML file whose
keys are the lower-case field names.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict

import yaml

from image_assembler.core.assembly.services import DEFAULT_OWNER_COMMAND_PATTERN

ENV_PREFIX = "IMAGE_ASSEMBLER_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if number < 0:
        raise ValueError(f"{name} cannot be negative, got {number}")
    return number


@dataclass(frozen=True)
class AssemblerConfig:
    """Settings of the assembler and its external tools.

    Attributes:
        mksquashfs_path: mksquashfs binary.
        cryptsetup_path: cryptsetup binary.
        gzip: Compress the partition with gzip.
        mksquashfs_mem: mksquashfs memory budget, empty for default.
        mksquashfs_procs: mksquashfs processors, 0 for default.
        owner_command_pattern: SUDO_COMMAND pattern enabling chown.
        log_level: Logging level name.
    """

    mksquashfs_path: str = "mksquashfs"
    cryptsetup_path: str = "cryptsetup"
    gzip: bool = False
    mksquashfs_mem: str = ""
    mksquashfs_procs: int = 0
    owner_command_pattern: str = DEFAULT_OWNER_COMMAND_PATTERN
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, values: Dict[str, Any]) -> "AssemblerConfig":
        """Build a config from a field name mapping, ignoring unknown keys.

        Raises:
            ValueError: If a value has the wrong type.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in values.items() if k in known and v is not None}
        if "gzip" in kwargs:
            kwargs["gzip"] = _parse_bool("gzip", kwargs["gzip"])
        if "mksquashfs_procs" in kwargs:
            kwargs["mksquashfs_procs"] = _parse_int("mksquashfs_procs", kwargs["mksquashfs_procs"])
        for name in ("mksquashfs_path", "cryptsetup_path", "mksquashfs_mem",
                     "owner_command_pattern", "log_level"):
            if name in kwargs:
                kwargs[name] = str(kwargs[name])
        return cls(**kwargs)

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """Load configuration from IMAGE_ASSEMBLER_* environment variables."""
        values = {}
        for f in fields(cls):
            env_name = f"{ENV_PREFIX}{f.name.upper()}"
            if env_name in os.environ:
                values[f.name] = os.environ[env_name]
        return cls.from_mapping(values)

    @classmethod
    def from_file(cls, path: str) -> "AssemblerConfig":
        """Load configuration from a YAML file.

        Raises:
            ValueError: If the document is not a mapping or has bad values.
            OSError: If the file cannot be read.
        """
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
        if not isinstance(document, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        return cls.from_mapping(document)
