# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Unit tests for PCR selections and composite digests (pcr.py).

import hashlib

import pytest

from quote_builders import ZERO_PCRS_DIGEST
from tpm_pytools.algorithms import TpmAlgorithm
from tpm_pytools.errors import MissingPcrValueError, UsageError, VerificationStatus
from tpm_pytools.pcr import PcrBankValues, PcrSelection, compose_pcr_digest

SHA256 = TpmAlgorithm.SHA256
SHA1 = TpmAlgorithm.SHA1


class TestPcrSelection:
    def test_indices_ascending(self):
        selection = PcrSelection(hash_alg=SHA256, bitmap=b"\x81\x00\x03")
        assert selection.indices == (0, 7, 16, 17)

    def test_empty_bitmap(self):
        assert PcrSelection(hash_alg=SHA256, bitmap=b"").indices == ()
        assert PcrSelection(hash_alg=SHA256, bitmap=b"\x00\x00\x00").indices == ()

    def test_from_indices(self):
        selection = PcrSelection.from_indices(SHA256, [17, 0, 7, 16])
        assert selection.bitmap == b"\x81\x00\x03"
        assert selection.is_selected(16)
        assert not selection.is_selected(1)
        assert not selection.is_selected(40)

    def test_from_indices_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            PcrSelection.from_indices(SHA256, [24])

    def test_str(self):
        assert str(PcrSelection.from_indices(SHA256, [0, 1])) == "sha256:0,1"


class TestPcrBankValues:
    def test_from_banks(self):
        values = PcrBankValues.from_banks({SHA256: {0: b"a", 1: b"b"}, SHA1: {0: b"c"}})
        assert len(values) == 3
        assert values[(SHA256, 1)] == b"b"
        assert values.get((SHA1, 5)) is None

    def test_read_only(self):
        values = PcrBankValues({(SHA256, 0): bytes(32)})
        with pytest.raises(TypeError):
            values[(SHA256, 1)] = bytes(32)


class TestComposePcrDigest:
    def test_two_zero_registers_known_digest(self, pcr_values):
        selection = PcrSelection.from_indices(SHA256, [0, 1])
        assert compose_pcr_digest([selection], pcr_values) == ZERO_PCRS_DIGEST

    def test_two_known_registers_known_digest(self):
        values = PcrBankValues.from_banks(
            {SHA256: {4: ZERO_PCRS_DIGEST, 9: ZERO_PCRS_DIGEST}}
        )
        selection = PcrSelection.from_indices(SHA256, [4, 9])
        assert compose_pcr_digest([selection], values) == bytes.fromhex(
            "db56114e00fdd4c1f85c892bf35ac9a89289aaecb1ebd0a96cde606a748b5d71"
        )

    def test_ascending_index_order_within_bank(self):
        a, b = b"\xaa" * 32, b"\xbb" * 32
        # Evidence inserted in descending order
        values = PcrBankValues({(SHA256, 3): b, (SHA256, 2): a})
        selection = PcrSelection.from_indices(SHA256, [3, 2])
        expected = hashlib.sha256(a + b).digest()
        assert compose_pcr_digest([selection], values) == expected

    def test_bank_order_follows_selection(self):
        sha1_value = b"\x01" * 20
        sha256_value = b"\x02" * 32
        values = PcrBankValues({(SHA1, 0): sha1_value, (SHA256, 0): sha256_value})
        selections = [
            PcrSelection.from_indices(SHA256, [0]),
            PcrSelection.from_indices(SHA1, [0]),
        ]
        expected = hashlib.sha256(sha256_value + sha1_value).digest()
        assert compose_pcr_digest(selections, values, SHA256) == expected
        reversed_expected = hashlib.sha256(sha1_value + sha256_value).digest()
        assert compose_pcr_digest(selections[::-1], values, SHA256) == reversed_expected

    def test_default_algorithm_is_first_bank(self):
        values = PcrBankValues({(SHA1, 0): b"\x00" * 20})
        selection = PcrSelection.from_indices(SHA1, [0])
        assert compose_pcr_digest([selection], values) == hashlib.sha1(b"\x00" * 20).digest()

    def test_explicit_algorithm(self):
        values = PcrBankValues({(SHA1, 0): b"\x00" * 20})
        selection = PcrSelection.from_indices(SHA1, [0])
        digest = compose_pcr_digest([selection], values, TpmAlgorithm.SHA384)
        assert digest == hashlib.sha384(b"\x00" * 20).digest()

    def test_empty_selection_needs_algorithm(self):
        with pytest.raises(UsageError):
            compose_pcr_digest([], PcrBankValues())
        assert compose_pcr_digest([], PcrBankValues(), SHA256) == bytes.fromhex(
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_missing_register(self, pcr_values):
        selection = PcrSelection.from_indices(SHA256, [0, 1, 7])
        with pytest.raises(MissingPcrValueError) as exc_info:
            compose_pcr_digest([selection], pcr_values)
        assert exc_info.value.index == 7
        assert exc_info.value.hash_alg == SHA256
        assert exc_info.value.status is VerificationStatus.MISSING_PCR_VALUE

    def test_register_in_other_bank_does_not_count(self, pcr_values):
        selection = PcrSelection.from_indices(SHA1, [0])
        with pytest.raises(MissingPcrValueError):
            compose_pcr_digest([selection], pcr_values)

    def test_plain_dict_evidence(self):
        values = {(SHA256, 0): bytes(32), (SHA256, 1): bytes(32)}
        selection = PcrSelection.from_indices(SHA256, [0, 1])
        assert compose_pcr_digest([selection], values) == ZERO_PCRS_DIGEST
