# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Test builders - Synthetic TPM structures for the test suite.

import struct

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, utils

from tpm_pytools.algorithms import TpmAlgorithm
from tpm_pytools.attestation import TPM2_GENERATED_VALUE, TPM2_ST_ATTEST_QUOTE

# SHA-256 over two all-zero SHA-256 registers
ZERO_PCRS_DIGEST = bytes.fromhex(
    "f5a5fd42d16a20302798ef6ed309979b43003d2320d9f0e8ea9831a92759fb4b"
)
NONCE = bytes.fromhex("1a2b3c4d")
QUALIFIED_SIGNER = b"\x00\x0b" + b"\x11" * 32


def build_attest(
    magic: int = TPM2_GENERATED_VALUE,
    attest_type: int = TPM2_ST_ATTEST_QUOTE,
    qualified_signer: bytes = QUALIFIED_SIGNER,
    extra_data: bytes = NONCE,
    clock_info: bytes = b"\x00" * 17,
    firmware_version: bytes = b"\x00" * 8,
    selections=((TpmAlgorithm.SHA256, b"\x03\x00\x00"),),
    pcr_digest: bytes = ZERO_PCRS_DIGEST,
) -> bytes:
    """Build a marshaled TPMS_ATTEST quote (big endian).

    With the defaults the layout is:
        0   magic            4   type
        6   name size        8   name (34 bytes)
        42  extra size       44  extra data (4 bytes)
        48  clock info       65  firmware version
        73  selection count  77  hash alg, 79 sizeofSelect, 80 bitmap
        83  digest size      85  digest (32 bytes), 117 end
    """
    out = struct.pack(">IH", magic, attest_type)
    out += struct.pack(">H", len(qualified_signer)) + qualified_signer
    out += struct.pack(">H", len(extra_data)) + extra_data
    out += clock_info + firmware_version
    out += struct.pack(">I", len(selections))
    for hash_alg, bitmap in selections:
        out += struct.pack(">HB", hash_alg, len(bitmap)) + bitmap
    out += struct.pack(">H", len(pcr_digest)) + pcr_digest
    return out


def build_tss_signature(scheme: int, hash_alg: int, signature: bytes) -> bytes:
    """Marshal a TPMT_SIGNATURE for an RSA scheme."""
    return struct.pack(">HHH", scheme, hash_alg, len(signature)) + signature


def build_tss_ecdsa_signature(hash_alg: int, der_signature: bytes, size: int = 32) -> bytes:
    """Marshal a TPMT_SIGNATURE for ECDSA from a DER signature."""
    r, s = utils.decode_dss_signature(der_signature)
    out = struct.pack(">HH", TpmAlgorithm.ECDSA, hash_alg)
    out += struct.pack(">H", size) + r.to_bytes(size, "big")
    out += struct.pack(">H", size) + s.to_bytes(size, "big")
    return out


def sign_rsassa(private_key, digest: bytes) -> bytes:
    return private_key.sign(digest, padding.PKCS1v15(), utils.Prehashed(hashes.SHA256()))


def flip_bit(data: bytes, bit: int) -> bytes:
    flipped = bytearray(data)
    flipped[bit // 8] ^= 1 << (bit % 8)
    return bytes(flipped)


