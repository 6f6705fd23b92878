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

"""Encryption key handling.

Plaintext keys are either a passphrase or 64 random bytes. Random keys are
wrapped with RSA-OAEP (SHA-256) for the recipient public key and stored as
a PEM "MESSAGE" block holding a DER OCTET STRING of the ciphertext.
"""

import base64
import logging
import secrets
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from image_assembler.core.assembly.exceptions import KeyDerivationError, KeyWrapError
from image_assembler.core.assembly.value_objects import KeyFormat, KeyInfo

logger = logging.getLogger(__name__)

PLAINTEXT_KEY_BYTES = 64
PEM_MESSAGE_TYPE = "MESSAGE"


def new_plaintext_key(key_info: KeyInfo) -> bytes:
    """Return the symmetric key for a key specification.

    Raises:
        KeyDerivationError: For an empty passphrase or unsupported format.
    """
    if key_info.format == KeyFormat.PEM:
        return secrets.token_bytes(PLAINTEXT_KEY_BYTES)

    if key_info.format == KeyFormat.PASSPHRASE:
        if not key_info.material:
            raise KeyDerivationError("passphrase is empty")
        return key_info.material.encode("utf-8")

    raise KeyDerivationError(f"unsupported key format: {key_info.format}")


def load_pem_public_key(path: str) -> rsa.RSAPublicKey:
    """Load an RSA public key from a PEM public key or certificate file.

    Raises:
        KeyWrapError: If the file is unreadable or holds no RSA public key.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise KeyWrapError(f"unable to read public key {path}: {exc}") from exc

    try:
        if b"-----BEGIN CERTIFICATE-----" in data:
            public_key = x509.load_pem_x509_certificate(data).public_key()
        else:
            public_key = serialization.load_pem_public_key(data)
    except ValueError as exc:
        raise KeyWrapError(f"unable to parse public key {path}: {exc}") from exc

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyWrapError(f"public key {path} is not an RSA key")
    return public_key


def _der_octet_string(data: bytes) -> bytes:
    length = len(data)
    if length < 0x80:
        return bytes([0x04, length]) + data
    length_bytes = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x04, 0x80 | len(length_bytes)]) + length_bytes + data


def _pem_encode(block_type: str, data: bytes) -> bytes:
    body = base64.b64encode(data).decode("ascii")
    lines = [body[i:i + 64] for i in range(0, len(body), 64)]
    return (
        f"-----BEGIN {block_type}-----\n"
        + "\n".join(lines)
        + f"\n-----END {block_type}-----\n"
    ).encode("ascii")


def encrypt_key(key_info: KeyInfo, plaintext: bytes) -> Optional[bytes]:
    """Wrap a plaintext key for the recipient of a key specification.

    Returns:
        PEM encoded wrapped key, or None for passphrase keys which have no
        recipient.

    Raises:
        KeyWrapError: If the public key cannot be loaded or used.
    """
    if key_info.format != KeyFormat.PEM:
        return None

    public_key = load_pem_public_key(key_info.path)
    try:
        ciphertext = public_key.encrypt(
            plaintext,
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA256()),
                algorithm=hashes.SHA256(),
                label=None,
            ),
        )
    except ValueError as exc:
        raise KeyWrapError(f"RSA-OAEP encryption failed: {exc}") from exc

    logger.debug("Wrapped filesystem key for %s", key_info.path)
    return _pem_encode(PEM_MESSAGE_TYPE, _der_octet_string(ciphertext))


class CryptKeyService:
    """KeyService port backed by this module."""

    def new_plaintext_key(self, key_info: KeyInfo) -> bytes:
        return new_plaintext_key(key_info)

    def encrypt_key(self, key_info: KeyInfo, plaintext: bytes) -> Optional[bytes]:
        return encrypt_key(key_info, plaintext)
