"""Unit tests for ChecksumService."""

import hashlib

import pytest

from speech_collector.lib.checksum import ChecksumService


class TestChecksumService:
    """Tests for payload checksums."""

    def test_checksum_has_algorithm_prefix(self) -> None:
        assert ChecksumService.compute_bytes_checksum(b"audio").startswith("sha256:")

    def test_checksum_matches_hashlib(self) -> None:
        data = b"RIFF....WAVEfmt "
        expected = hashlib.sha256(data).hexdigest()

        assert ChecksumService.compute_bytes_checksum(data) == f"sha256:{expected}"

    def test_verify_accepts_matching_payload(self) -> None:
        checksum = ChecksumService.compute_bytes_checksum(b"payload")

        assert ChecksumService.verify_bytes_checksum(b"payload", checksum) is True

    def test_verify_rejects_altered_payload(self) -> None:
        checksum = ChecksumService.compute_bytes_checksum(b"payload")

        assert ChecksumService.verify_bytes_checksum(b"pay1oad", checksum) is False

    def test_unsupported_algorithm_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported checksum algorithm"):
            ChecksumService.verify_bytes_checksum(b"payload", "md5:abc")

    def test_malformed_checksum_raises(self) -> None:
        with pytest.raises(ValueError):
            ChecksumService.parse_checksum("no-separator")
