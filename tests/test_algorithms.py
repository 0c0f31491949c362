# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Unit tests for algorithm identifiers and hashing (algorithms.py).

import pytest
from cryptography.hazmat.primitives import hashes

from tpm_pytools.algorithms import (
    TpmAlgorithm,
    algorithm_name,
    get_digest_size,
    get_hash_algorithm,
    hash_data,
    is_hash_algorithm,
    parse_algorithm,
)
from tpm_pytools.errors import UnsupportedHashAlgorithmError


class TestHashAlgorithms:
    def test_mapping(self):
        assert isinstance(get_hash_algorithm(TpmAlgorithm.SHA256), hashes.SHA256)
        assert isinstance(get_hash_algorithm(0x000C), hashes.SHA384)

    @pytest.mark.parametrize(
        "alg, size",
        [
            (TpmAlgorithm.SHA1, 20),
            (TpmAlgorithm.SHA256, 32),
            (TpmAlgorithm.SHA384, 48),
            (TpmAlgorithm.SHA512, 64),
        ],
    )
    def test_digest_sizes(self, alg, size):
        assert get_digest_size(alg) == size

    def test_known_digests(self):
        assert hash_data(TpmAlgorithm.SHA256, b"abc") == bytes.fromhex(
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )
        assert hash_data(TpmAlgorithm.SHA1, b"abc") == bytes.fromhex(
            "a9993e364706816aba3e25717850c26c9cd0d89d"
        )

    @pytest.mark.parametrize("alg", [TpmAlgorithm.RSASSA, TpmAlgorithm.SM3_256, 0x7777])
    def test_unsupported(self, alg):
        assert not is_hash_algorithm(alg)
        with pytest.raises(UnsupportedHashAlgorithmError):
            hash_data(alg, b"")


class TestParseAlgorithm:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("sha256", TpmAlgorithm.SHA256),
            ("SHA1", TpmAlgorithm.SHA1),
            ("0xb", TpmAlgorithm.SHA256),
            ("12", TpmAlgorithm.SHA384),
            (TpmAlgorithm.SHA512.value, TpmAlgorithm.SHA512),
        ],
    )
    def test_hash_algorithms(self, value, expected):
        assert parse_algorithm(value) is expected

    def test_signature_schemes(self):
        assert parse_algorithm("rsassa", signature=True) is TpmAlgorithm.RSASSA
        assert parse_algorithm("ecdsa", signature=True) is TpmAlgorithm.ECDSA

    @pytest.mark.parametrize("value", ["md5", "0x9999", "rsassa", ""])
    def test_rejects_non_hash(self, value):
        with pytest.raises(ValueError):
            parse_algorithm(value)

    def test_rejects_hash_as_scheme(self):
        with pytest.raises(ValueError):
            parse_algorithm("sha256", signature=True)

    def test_names(self):
        assert algorithm_name(TpmAlgorithm.SHA256) == "sha256"
        assert algorithm_name(0x7777) == "0x7777"
