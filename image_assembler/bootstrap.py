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

"""Wiring of the assemble image use case with its infrastructure."""

import logging
from typing import Optional

from image_assembler.config import AssemblerConfig
from image_assembler.core.assembly.services import OwnershipPolicy
from image_assembler.infra.crypt import CryptsetupDevice
from image_assembler.infra.cryptkey import CryptKeyService
from image_assembler.infra.id_generator import UUIDv4Generator
from image_assembler.infra.machine import ElfArchitectureResolver
from image_assembler.infra.ownership import ChownOwnershipFinalizer
from image_assembler.infra.sif_writer import SIFContainerWriter
from image_assembler.infra.squashfs import MksquashfsPartitionBuilder
from image_assembler.logging_config import configure_logging
from image_assembler.orchestrator.assembly.use_cases import AssembleImageUseCase

logger = logging.getLogger(__name__)


def create_assemble_image_use_case(
    config: Optional[AssemblerConfig] = None,
    setup_logging: bool = False,
    config_path: Optional[str] = None,
) -> AssembleImageUseCase:
    """Build an AssembleImageUseCase backed by the real tools.

    Args:
        config: Assembler settings, read from config_path or the
            environment if None.
        setup_logging: Configure root logging at config.log_level.
        config_path: YAML settings file, used when config is None.

    Returns:
        Ready to use AssembleImageUseCase.

    Raises:
        ValueError: If the settings file has bad values.
        OSError: If the settings file cannot be read.
    """
    if config is None:
        if config_path:
            config = AssemblerConfig.from_file(config_path)
        else:
            config = AssemblerConfig.from_env()
    if setup_logging:
        configure_logging(config.log_level)
    logger.debug("Assembler configuration: %s", config)

    return AssembleImageUseCase(
        partition_builder=MksquashfsPartitionBuilder(config.mksquashfs_path),
        architecture_resolver=ElfArchitectureResolver(),
        key_service=CryptKeyService(),
        filesystem_encryptor=CryptsetupDevice(config.cryptsetup_path),
        container_writer=SIFContainerWriter(),
        ownership_finalizer=ChownOwnershipFinalizer(
            policy=OwnershipPolicy(config.owner_command_pattern),
        ),
        container_id_generator=UUIDv4Generator(),
        gzip=config.gzip,
        mksquashfs_mem=config.mksquashfs_mem,
        mksquashfs_procs=config.mksquashfs_procs,
    )
