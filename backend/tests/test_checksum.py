import hashlib

import pytest

from docudigitize.utils.checksum import calculate_content_hash, calculate_file_checksum


def test_known_sha256_vectors():
    assert calculate_content_hash(b"abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert calculate_content_hash(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_hash_spanning_many_chunks_matches_hashlib():
    data = bytes(range(256)) * 100  # 25600 bytes, not a multiple of the chunk size
    assert calculate_content_hash(data) == hashlib.sha256(data).hexdigest()


def test_same_bytes_same_hash_different_bytes_different_hash():
    assert calculate_content_hash(b"scan-1") == calculate_content_hash(b"scan-1")
    assert calculate_content_hash(b"scan-1") != calculate_content_hash(b"scan-2")


def test_file_checksum_matches_content_hash(tmp_path):
    data = b"%PDF-1.4 fake pdf body" * 500
    path = tmp_path / "scan.pdf"
    path.write_bytes(data)
    assert calculate_file_checksum(path) == calculate_content_hash(data)


def test_file_checksum_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        calculate_file_checksum(tmp_path / "missing.png")
