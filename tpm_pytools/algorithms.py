# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# TPM algorithms - Algorithm identifiers and hash primitives for quote verification.

import enum
import logging
from typing import Union

from cryptography.hazmat.primitives import hashes

from .errors import UnsupportedHashAlgorithmError

logger = logging.getLogger(__name__)

# Largest digest carried in a TPMU_HA (SHA-512)
TPM2_MAX_DIGEST_SIZE = 64


class TpmAlgorithm(enum.IntEnum):
    """
    TPM_ALG_ID values used by quotes, PCR banks and signatures.

    Values are from the TCG Algorithm Registry.
    """

    ERROR = 0x0000
    SHA1 = 0x0004
    HMAC = 0x0005
    NULL = 0x0010
    SHA256 = 0x000B
    SHA384 = 0x000C
    SHA512 = 0x000D
    RSASSA = 0x0014
    RSAPSS = 0x0016
    ECDSA = 0x0018
    SM3_256 = 0x0012
    SHA3_256 = 0x0027
    SHA3_384 = 0x0028
    SHA3_512 = 0x0029


HASH_ALGORITHMS = {
    TpmAlgorithm.SHA1: hashes.SHA1,
    TpmAlgorithm.SHA256: hashes.SHA256,
    TpmAlgorithm.SHA384: hashes.SHA384,
    TpmAlgorithm.SHA512: hashes.SHA512,
    TpmAlgorithm.SHA3_256: hashes.SHA3_256,
    TpmAlgorithm.SHA3_384: hashes.SHA3_384,
    TpmAlgorithm.SHA3_512: hashes.SHA3_512,
}

SIGNATURE_SCHEMES = (
    TpmAlgorithm.RSASSA,
    TpmAlgorithm.RSAPSS,
    TpmAlgorithm.ECDSA,
)


def get_hash_algorithm(alg_id: int) -> hashes.HashAlgorithm:
    """
    Map a TPM hash algorithm identifier to a cryptography hash instance.

    Args:
        alg_id: TPM_ALG_ID of a hash algorithm

    Returns:
        hashes.HashAlgorithm: A fresh hash algorithm instance

    Raises:
        UnsupportedHashAlgorithmError: If the identifier is not a supported hash
    """
    try:
        factory = HASH_ALGORITHMS[TpmAlgorithm(alg_id)]
    except (ValueError, KeyError):
        raise UnsupportedHashAlgorithmError(alg_id) from None
    return factory()


def is_hash_algorithm(alg_id: int) -> bool:
    """Return True if alg_id names a hash this package can compute."""
    try:
        return TpmAlgorithm(alg_id) in HASH_ALGORITHMS
    except ValueError:
        return False


def get_digest_size(alg_id: int) -> int:
    """Digest size in bytes of a supported TPM hash algorithm."""
    return get_hash_algorithm(alg_id).digest_size


def hash_data(alg_id: int, data: bytes) -> bytes:
    """
    Hash data with the TPM hash algorithm alg_id.

    Raises:
        UnsupportedHashAlgorithmError: If alg_id is not a supported hash
    """
    digest = hashes.Hash(get_hash_algorithm(alg_id))
    digest.update(data)
    return digest.finalize()


def algorithm_name(alg_id: int) -> str:
    """Human-readable name of an algorithm identifier, for logs."""
    try:
        return TpmAlgorithm(alg_id).name.lower()
    except ValueError:
        return f"0x{alg_id:04x}"


def parse_algorithm(value: Union[str, int], signature: bool = False) -> TpmAlgorithm:
    """
    Parse an algorithm given by name ("sha256", "rsassa") or number ("0xb", "11").

    Args:
        value: Algorithm name or numeric identifier
        signature: Accept signature schemes instead of hash algorithms

    Returns:
        TpmAlgorithm: The parsed algorithm

    Raises:
        ValueError: If the value does not name an algorithm of the requested kind
    """
    kind = "signature scheme" if signature else "hash algorithm"
    if isinstance(value, int):
        alg_id = value
    else:
        text = value.strip()
        try:
            alg_id = int(text, 0)
        except ValueError:
            # Names as used by tpm2-tools options
            name = text.upper().replace("-", "_")
            if name == "SM3":
                name = "SM3_256"
            try:
                alg_id = TpmAlgorithm[name].value
            except KeyError:
                raise ValueError(f"Unknown {kind}: {value!r}") from None

    try:
        alg = TpmAlgorithm(alg_id)
    except ValueError:
        raise ValueError(f"Unknown {kind}: {value!r}") from None

    if signature and alg not in SIGNATURE_SCHEMES:
        raise ValueError(f"Not a signature scheme: {value!r}")
    if not signature and alg not in HASH_ALGORITHMS:
        raise ValueError(f"Not a supported hash algorithm: {value!r}")

    logger.debug(f"Parsed {kind} {value!r} as {alg.name}")
    return alg
