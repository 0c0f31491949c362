# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# TPM signatures - TPMT_SIGNATURE decoding and signature verification over quote digests.

from dataclasses import dataclass
from typing import Iterable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa, utils

from . import tpm_logging
from .algorithms import (
    SIGNATURE_SCHEMES,
    TpmAlgorithm,
    algorithm_name,
    get_hash_algorithm,
    is_hash_algorithm,
)
from .errors import MalformedSignatureError, UnsupportedSchemeError
from .reader import AttestReader

logger = tpm_logging.get_logger(__name__)

# TPM2B_PUBLIC_KEY_RSA and TPM2B_ECC_PARAMETER buffer sizes
MAX_RSA_KEY_BYTES = 512
MAX_ECC_KEY_BYTES = 128


@dataclass(frozen=True)
class TpmSignature:
    """
    A quote signature: scheme, hash algorithm and signature bytes.

    RSA signatures hold the raw signature block. ECDSA signatures are held
    DER-encoded, as the cryptography library expects them.
    """

    scheme: int
    hash_alg: int
    signature: bytes

    @classmethod
    def unpack(cls, binary_data: bytes, debug: bool = False) -> "TpmSignature":
        """
        Create a TpmSignature from a marshaled TPMT_SIGNATURE (TSS format).

        Args:
            binary_data: TPMT_SIGNATURE bytes, big endian
            debug: If True, log the decoded fields

        Returns:
            TpmSignature instance

        Raises:
            MalformedSignatureError: If the structure is truncated or oversized
            UnsupportedSchemeError: If the signature algorithm is not supported
        """
        reader = AttestReader(binary_data, error=MalformedSignatureError)
        scheme = reader.read_u16("sig_alg")
        hash_alg = reader.read_u16("hash_alg")

        if scheme in (TpmAlgorithm.RSASSA, TpmAlgorithm.RSAPSS):
            signature = reader.read_sized("rsa_signature", limit=MAX_RSA_KEY_BYTES)
        elif scheme == TpmAlgorithm.ECDSA:
            r = reader.read_sized("ecdsa_r", limit=MAX_ECC_KEY_BYTES, more=True)
            s = reader.read_sized("ecdsa_s", limit=MAX_ECC_KEY_BYTES)
            signature = utils.encode_dss_signature(
                int.from_bytes(r, "big"), int.from_bytes(s, "big")
            )
        else:
            raise UnsupportedSchemeError(scheme)

        if debug:
            logger.debug(
                f"Signature scheme {algorithm_name(scheme)}, hash {algorithm_name(hash_alg)}"
            )
            logger.debug(f"Signature: {signature.hex()}")
        if reader.remaining:
            logger.debug(f"{reader.remaining} bytes follow the TPMT_SIGNATURE")

        return cls(scheme=scheme, hash_alg=hash_alg, signature=signature)

    @classmethod
    def from_plain(cls, data: bytes, scheme: int, hash_alg: int) -> "TpmSignature":
        """
        Wrap a plain signature (raw RSA block or DER-encoded ECDSA) with its parameters.

        Raises:
            UnsupportedSchemeError: If scheme is not a supported signature scheme
        """
        if scheme not in SIGNATURE_SCHEMES:
            raise UnsupportedSchemeError(scheme)
        return cls(scheme=scheme, hash_alg=hash_alg, signature=bytes(data))

    def __repr__(self) -> str:
        return (
            f"TpmSignature(scheme={algorithm_name(self.scheme)}, "
            f"hash={algorithm_name(self.hash_alg)}, sig={self.signature.hex()[:16]}...)"
        )


def verify_signature(
    scheme: int,
    hash_alg: int,
    message_digest: bytes,
    signature: bytes,
    public_key,
    allowed_schemes: Iterable[int] = SIGNATURE_SCHEMES,
) -> bool:
    """
    Verify a signature over a precomputed message digest.

    Every failure (wrong key type, wrong digest length, bad padding, bad
    signature) is reported as False with no further detail.

    Args:
        scheme: TPM_ALG_ID of the signature scheme
        hash_alg: TPM_ALG_ID of the hash used for message_digest
        message_digest: Digest of the signed message
        signature: Raw RSA signature or DER-encoded ECDSA signature
        public_key: cryptography RSA or EC public key
        allowed_schemes: Schemes accepted by the caller's configuration

    Returns:
        bool: True if the signature verifies, False otherwise

    Raises:
        UnsupportedSchemeError: If scheme is not a supported and allowed scheme
    """
    if scheme not in SIGNATURE_SCHEMES or scheme not in tuple(allowed_schemes):
        logger.debug(
            f"Signature verification rejected: unsupported scheme {algorithm_name(scheme)}"
        )
        raise UnsupportedSchemeError(scheme)

    if not is_hash_algorithm(hash_alg):
        logger.debug("Signature verification rejected: unsupported hash algorithm")
        return False
    hash_algorithm = get_hash_algorithm(hash_alg)
    if len(message_digest) != hash_algorithm.digest_size or not signature:
        logger.debug("Signature verification rejected: invalid arguments")
        return False

    prehashed = utils.Prehashed(hash_algorithm)
    try:
        if scheme == TpmAlgorithm.ECDSA:
            if not isinstance(public_key, ec.EllipticCurvePublicKey):
                logger.debug("Signature verification rejected: key is not an EC key")
                return False
            public_key.verify(signature, message_digest, ec.ECDSA(prehashed))
        else:
            if not isinstance(public_key, rsa.RSAPublicKey):
                logger.debug("Signature verification rejected: key is not an RSA key")
                return False
            if scheme == TpmAlgorithm.RSASSA:
                pad = padding.PKCS1v15()
            else:
                pad = padding.PSS(
                    mgf=padding.MGF1(get_hash_algorithm(hash_alg)),
                    salt_length=padding.PSS.AUTO,
                )
            public_key.verify(signature, message_digest, pad, prehashed)
    except (InvalidSignature, ValueError):
        logger.debug("Signature verification failed")
        return False

    return True
