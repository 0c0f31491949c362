# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Key loading - Attestation public keys from PEM/DER keys or certificates.

import os
from typing import Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from . import tpm_logging
from .errors import UsageError

logger = tpm_logging.get_logger(__name__)

PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey]


def load_public_key(data: bytes) -> PublicKey:
    """
    Load an attestation public key.

    Accepts a SubjectPublicKeyInfo key or an X.509 certificate, PEM or DER.

    Args:
        data: Encoded key or certificate

    Returns:
        RSA or EC public key

    Raises:
        UsageError: If the data is not a supported key or certificate
    """
    is_pem = data.lstrip().startswith(b"-----BEGIN")
    try:
        if is_pem and b"CERTIFICATE" in data:
            key = x509.load_pem_x509_certificate(data).public_key()
        elif is_pem:
            key = serialization.load_pem_public_key(data)
        else:
            try:
                key = serialization.load_der_public_key(data)
            except ValueError:
                key = x509.load_der_x509_certificate(data).public_key()
    except (ValueError, UnsupportedAlgorithm) as e:
        raise UsageError(f"Unable to load public key: {e}") from e

    if not isinstance(key, (rsa.RSAPublicKey, ec.EllipticCurvePublicKey)):
        raise UsageError(f"Unsupported public key type: {type(key).__name__}")

    logger.debug(f"Loaded {type(key).__name__} ({key.key_size} bits)")
    return key


def load_public_key_file(path: str) -> PublicKey:
    """
    Load an attestation public key from a file.

    Raises:
        FileNotFoundError: If path does not exist
        UsageError: If the file does not hold a supported key
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Public key file not found: {path}")
    with open(path, "rb") as f:
        return load_public_key(f.read())
