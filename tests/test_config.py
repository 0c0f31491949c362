# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Unit tests for verifier configuration (config.py).

import json

import pytest

from tpm_pytools.algorithms import SIGNATURE_SCHEMES, TpmAlgorithm
from tpm_pytools.config import VerifierConfig
from tpm_pytools.errors import UsageError


class TestVerifierConfig:
    def test_defaults(self):
        config = VerifierConfig()
        assert config.max_blob_size == 16 * 1024
        assert config.max_extra_data_size == 1024
        assert config.allowed_schemes == SIGNATURE_SCHEMES
        assert config.constant_time_compare is True

    @pytest.mark.parametrize("size", [4 * 1024, 64 * 1024])
    def test_blob_size_bounds_accepted(self, size):
        assert VerifierConfig(max_blob_size=size).max_blob_size == size

    @pytest.mark.parametrize("size", [4 * 1024 - 1, 64 * 1024 + 1, 0])
    def test_blob_size_out_of_range(self, size):
        with pytest.raises(UsageError):
            VerifierConfig(max_blob_size=size)

    def test_extra_data_size_out_of_range(self):
        with pytest.raises(UsageError):
            VerifierConfig(max_extra_data_size=-1)

    def test_empty_schemes(self):
        with pytest.raises(UsageError):
            VerifierConfig(allowed_schemes=())

    def test_non_signature_scheme(self):
        with pytest.raises(UsageError):
            VerifierConfig(allowed_schemes=(TpmAlgorithm.SHA256,))


class TestFromDict:
    def test_empty(self):
        assert VerifierConfig.from_dict({}) == VerifierConfig()

    def test_values(self):
        config = VerifierConfig.from_dict(
            {
                "max_blob_size": 8192,
                "max_extra_data_size": 64,
                "allowed_schemes": ["ecdsa", "0x14"],
                "constant_time_compare": False,
            }
        )
        assert config.max_blob_size == 8192
        assert config.max_extra_data_size == 64
        assert config.allowed_schemes == (TpmAlgorithm.ECDSA, TpmAlgorithm.RSASSA)
        assert config.constant_time_compare is False

    def test_unknown_key(self):
        with pytest.raises(UsageError, match="max_quote_size"):
            VerifierConfig.from_dict({"max_quote_size": 8192})

    @pytest.mark.parametrize(
        "data",
        [
            {"max_blob_size": "8192"},
            {"max_blob_size": True},
            {"constant_time_compare": 1},
            {"allowed_schemes": ["sha256"]},
            {"allowed_schemes": 5},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(UsageError):
            VerifierConfig.from_dict(data)


class TestFromFile:
    def test_load(self, tmp_path):
        path = tmp_path / "verifier.json"
        path.write_text(json.dumps({"allowed_schemes": ["rsassa"]}))
        config = VerifierConfig.from_file(str(path))
        assert config.allowed_schemes == (TpmAlgorithm.RSASSA,)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            VerifierConfig.from_file(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "verifier.json"
        path.write_text("{not json")
        with pytest.raises(UsageError):
            VerifierConfig.from_file(str(path))

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "verifier.json"
        path.write_text("[]")
        with pytest.raises(UsageError):
            VerifierConfig.from_file(str(path))
