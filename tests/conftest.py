# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Shared fixtures - Keys, PCR evidence and a complete signed quote.

from dataclasses import dataclass

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from quote_builders import NONCE, build_attest, sign_rsassa
from tpm_pytools.algorithms import TpmAlgorithm
from tpm_pytools.pcr import PcrBankValues
from tpm_pytools.signature import TpmSignature
from tpm_pytools.verify import compute_message_digest


@dataclass
class QuoteFixture:
    blob: bytes
    signature: TpmSignature
    public_key: object
    private_key: object
    extra_data: bytes
    pcr_values: PcrBankValues
    message_digest: bytes


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def pcr_values():
    """SHA-256 PCR0 and PCR1, both still zero."""
    return PcrBankValues.from_banks(
        {TpmAlgorithm.SHA256: {0: bytes(32), 1: bytes(32)}}
    )


@pytest.fixture
def quote(rsa_key, pcr_values):
    """A complete and consistent RSASSA/SHA-256 quote."""
    blob = build_attest()
    digest = compute_message_digest(blob, TpmAlgorithm.SHA256)
    signature = TpmSignature(
        scheme=TpmAlgorithm.RSASSA,
        hash_alg=TpmAlgorithm.SHA256,
        signature=sign_rsassa(rsa_key, digest),
    )
    return QuoteFixture(
        blob=blob,
        signature=signature,
        public_key=rsa_key.public_key(),
        private_key=rsa_key,
        extra_data=NONCE,
        pcr_values=pcr_values,
        message_digest=digest,
    )
