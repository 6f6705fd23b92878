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

"""cryptsetup adapter for the FilesystemEncryptor port."""

import contextlib
import logging
import os
import secrets
import shutil
import subprocess
import tempfile
from typing import List, Optional

from image_assembler.core.assembly.exceptions import FilesystemEncryptionError
from image_assembler.fileops import remove_quietly

logger = logging.getLogger(__name__)

# LUKS2 header is about 16 MiB with default settings
CRYPT_HEADER_SIZE = 16 * 1024 * 1024


class CryptsetupDevice:
    """Encrypts squashfs files into LUKS2 block files with cryptsetup.

    Requires superuser privilege to open device-mapper targets.
    """

    def __init__(self, cryptsetup_path: str = "cryptsetup", tmp_dir: Optional[str] = None) -> None:
        """Initialize the device helper.

        Args:
            cryptsetup_path: cryptsetup binary.
            tmp_dir: Directory for encrypted files, system default if None.
        """
        self.cryptsetup_path = cryptsetup_path
        self.tmp_dir = tmp_dir

    def _run(self, args: List[str], key: bytes, path: str) -> None:
        command = [self.cryptsetup_path, *args]
        logger.debug("Running command: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                input=key,
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            raise FilesystemEncryptionError(
                path, f"unable to run {self.cryptsetup_path}: {exc}"
            ) from exc

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            logger.error("cryptsetup %s failed with exit code %s", args[0], result.returncode)
            raise FilesystemEncryptionError(
                path,
                f"cryptsetup {args[0]} failed with exit code {result.returncode}: {stderr}",
            )

    def _close(self, name: str, path: str) -> None:
        self._run(["close", name], b"", path)

    def encrypt_filesystem(self, path: str, key: bytes) -> str:
        """Encrypt a squashfs file into a new LUKS2 file.

        Args:
            path: Plaintext squashfs file.
            key: Symmetric key, passed to cryptsetup on stdin.

        Returns:
            Path of the encrypted file. The caller removes it.

        Raises:
            FilesystemEncryptionError: If any cryptsetup step or copy fails.
        """
        try:
            fs_size = os.path.getsize(path)
        except OSError as exc:
            raise FilesystemEncryptionError(path, f"unable to stat filesystem: {exc}") from exc

        try:
            fd, crypt_path = tempfile.mkstemp(prefix="crypt-", dir=self.tmp_dir)
        except OSError as exc:
            raise FilesystemEncryptionError(path, f"unable to create crypt file: {exc}") from exc

        with contextlib.ExitStack() as cleanup:
            cleanup.callback(remove_quietly, crypt_path)

            try:
                with os.fdopen(fd, "wb") as crypt_file:
                    crypt_file.truncate(fs_size + CRYPT_HEADER_SIZE)
            except OSError as exc:
                raise FilesystemEncryptionError(path, f"unable to size crypt file: {exc}") from exc

            self._run(
                ["luksFormat", "--batch-mode", "--type", "luks2", "--key-file", "-", crypt_path],
                key,
                path,
            )

            name = f"image-assembler-{secrets.token_hex(8)}"
            self._run(["open", "--type", "luks2", "--key-file", "-", crypt_path, name], key, path)
            with contextlib.ExitStack() as mapping:
                mapping.callback(self._close, name, path)
                device = os.path.join("/dev/mapper", name)
                try:
                    with open(path, "rb") as src, open(device, "r+b") as dst:
                        shutil.copyfileobj(src, dst)
                        dst.flush()
                        os.fsync(dst.fileno())
                except OSError as exc:
                    raise FilesystemEncryptionError(
                        path, f"unable to copy filesystem into {device}: {exc}"
                    ) from exc

            cleanup.pop_all()

        logger.info("Filesystem %s encrypted into %s", path, crypt_path)
        return crypt_path
