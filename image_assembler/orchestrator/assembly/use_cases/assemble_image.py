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

"""AssembleImage use case implementation."""

import contextlib
import logging
import os
import shutil
import tempfile
from typing import Callable, Optional, Tuple

from image_assembler.core.assembly.entities import (
    AssembledDescriptors,
    BuildBundle,
    CreateInfo,
    EncryptionContext,
)
from image_assembler.core.assembly.exceptions import (
    AssemblyDomainError,
    ContainerWriteError,
    OwnershipChangeError,
    PartitionBuildError,
)
from image_assembler.core.assembly.ports import (
    ArchitectureResolver,
    ContainerIdGenerator,
    ContainerImage,
    ContainerWriter,
    FilesystemEncryptor,
    KeyService,
    OwnershipFinalizer,
    PartitionBuilder,
)
from image_assembler.core.assembly.services import DescriptorAssembler, PartitionFlagsService
from image_assembler.core.assembly.value_objects import ContainerId, DataType
from image_assembler.fileops import remove_quietly

from ..commands import AssembleImageCommand
from ..dtos import AssemblyResponse

logger = logging.getLogger(__name__)


def _running_as_root() -> bool:
    return os.getuid() == 0


class AssembleImageUseCase:
    """Use case assembling a SIF image from a build bundle.

    This use case orchestrates the build with the following guarantees:
    - Strict order: partition, optional encryption, descriptors, write, chown
    - Cleanup: every temporary file is removed on success and on failure
    - Atomic output: the destination holds either the new complete image,
      or nothing new at all
    - Best-effort ownership: chown failures never fail the build
    """

    def __init__(
        self,
        partition_builder: PartitionBuilder,
        architecture_resolver: ArchitectureResolver,
        key_service: KeyService,
        filesystem_encryptor: FilesystemEncryptor,
        container_writer: ContainerWriter,
        ownership_finalizer: OwnershipFinalizer,
        container_id_generator: ContainerIdGenerator,
        gzip: bool = False,
        mksquashfs_mem: str = "",
        mksquashfs_procs: int = 0,
        is_superuser: Callable[[], bool] = _running_as_root,
    ) -> None:
        """Initialize use case with its collaborators.

        Args:
            partition_builder: Filesystem compression tool.
            architecture_resolver: Target architecture detection.
            key_service: Key derivation and wrapping.
            filesystem_encryptor: Block-level encryption facility.
            container_writer: SIF serialization.
            ownership_finalizer: Post-build chown.
            container_id_generator: Image identifier generator.
            gzip: Compress the partition with gzip.
            mksquashfs_mem: Compressor memory budget.
            mksquashfs_procs: Compressor parallelism.
            is_superuser: Returns True if the process runs as root.
        """
        self._partition_builder = partition_builder
        self._architecture_resolver = architecture_resolver
        self._key_service = key_service
        self._filesystem_encryptor = filesystem_encryptor
        self._container_writer = container_writer
        self._ownership_finalizer = ownership_finalizer
        self._container_id_generator = container_id_generator
        self._gzip = gzip
        self._mksquashfs_mem = mksquashfs_mem
        self._mksquashfs_procs = mksquashfs_procs
        self._is_superuser = is_superuser

    def execute(self, command: AssembleImageCommand) -> AssemblyResponse:
        """Assemble the image described by the command.

        Args:
            command: Bundle and destination.

        Returns:
            AssemblyResponse DTO describing the committed image.

        Raises:
            AssemblyDomainError: Subclass naming the failed stage.
        """
        logger.info("Creating SIF file...")
        try:
            return self._assemble(command.bundle, command.destination)
        except AssemblyDomainError as exc:
            if exc.destination is None:
                exc.destination = command.destination
            stage = exc.stage.value if exc.stage else "unknown"
            logger.error("Assembly of %s failed at %s: %s", command.destination, stage, exc.message)
            raise

    def _assemble(self, bundle: BuildBundle, destination: str) -> AssemblyResponse:
        with contextlib.ExitStack() as cleanup:
            fs_path = self._create_partition_file(bundle, cleanup)
            arch = self._architecture_resolver.resolve(bundle.rootfs_path)
            self._build_partition(bundle, fs_path)

            context: Optional[EncryptionContext] = None
            if bundle.options.encrypted:
                context = self._derive_key(bundle)
                cleanup.callback(context.discard)
                fs_path = self._encrypt_partition(fs_path, context, cleanup)
                context.wrapped_key = self._key_service.encrypt_key(
                    context.key_info, context.plaintext
                )
                if not context.has_wrapped_key:
                    logger.warning(
                        "Encrypted partition has no embedded key, "
                        "the image can only be unlocked with the original key"
                    )

            container_id = self._container_id_generator.generate()
            assembled = cleanup.enter_context(
                DescriptorAssembler.assemble(
                    bundle,
                    fs_path,
                    arch,
                    wrapped_key=context.wrapped_key if context else None,
                    encrypted=context is not None,
                )
            )
            image = self._write_container(destination, container_id, assembled)
            descriptor_count = len(assembled.descriptors)
            key_embedded = bool(assembled.find(DataType.CRYPTO_MESSAGE))

        owner = self._finalize_ownership(destination)

        return AssemblyResponse.from_handle(
            image.handle,
            arch=arch,
            encrypted=context is not None,
            key_embedded=key_embedded,
            descriptor_count=descriptor_count,
            size=image.size,
            owner=owner,
        )

    def _create_partition_file(self, bundle: BuildBundle, cleanup: contextlib.ExitStack) -> str:
        """Reserve a unique squashfs file in the scratch directory."""
        try:
            fd, fs_path = tempfile.mkstemp(prefix="squashfs-", dir=bundle.tmp_dir)
        except OSError as exc:
            raise PartitionBuildError(
                bundle.tmp_dir, f"while creating temporary file for squashfs: {exc}"
            ) from exc
        os.close(fd)
        cleanup.callback(remove_quietly, fs_path)
        return fs_path

    def _build_partition(self, bundle: BuildBundle, fs_path: str) -> None:
        """Compress the root filesystem into fs_path."""
        flags = PartitionFlagsService.build_flags(
            is_superuser=self._is_superuser(),
            gzip=self._gzip,
            mem=self._mksquashfs_mem,
            procs=self._mksquashfs_procs,
        )
        self._partition_builder.create([bundle.rootfs_path], fs_path, flags)

    def _derive_key(self, bundle: BuildBundle) -> EncryptionContext:
        """Obtain the plaintext key for the requested encryption."""
        key_info = bundle.options.encryption_key_info
        plaintext = self._key_service.new_plaintext_key(key_info)
        return EncryptionContext(key_info=key_info, plaintext=plaintext)

    def _encrypt_partition(
        self,
        fs_path: str,
        context: EncryptionContext,
        cleanup: contextlib.ExitStack,
    ) -> str:
        """Encrypt the partition, returning the superseding file path."""
        crypt_path = self._filesystem_encryptor.encrypt_filesystem(fs_path, context.plaintext)
        cleanup.callback(remove_quietly, crypt_path)
        return crypt_path

    def _write_container(
        self,
        destination: str,
        container_id: ContainerId,
        assembled: AssembledDescriptors,
    ) -> ContainerImage:
        """Replace anything at destination with the new image."""
        self._remove_destination(destination)
        image = self._container_writer.create(
            CreateInfo(
                destination=destination,
                container_id=container_id,
                descriptors=assembled.descriptors,
            )
        )
        image.unload()
        return image

    @staticmethod
    def _remove_destination(destination: str) -> None:
        """Remove whatever exists at the build destination."""
        try:
            if os.path.isdir(destination) and not os.path.islink(destination):
                shutil.rmtree(destination)
            elif os.path.lexists(destination):
                os.remove(destination)
        except OSError as exc:
            raise ContainerWriteError(
                destination, f"while removing existing destination: {exc}"
            ) from exc

    def _finalize_ownership(self, destination: str) -> Optional[Tuple[int, int]]:
        """Hand the image to the sudo caller, never failing the build."""
        try:
            return self._ownership_finalizer.finalize(destination)
        except OwnershipChangeError as exc:
            logger.warning("%s", exc.message)
            return None
