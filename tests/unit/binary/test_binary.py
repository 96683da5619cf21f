"""Tests for the NUL-byte binary sniffer."""

from __future__ import annotations

import unittest

from apc.binary import BINARY_SAMPLE_SIZE, is_binary


class BinarySnifferTests(unittest.TestCase):
    def test_plain_text_is_not_binary(self) -> None:
        self.assertFalse(is_binary(b"hello\nworld\n"))

    def test_empty_buffer_is_not_binary(self) -> None:
        self.assertFalse(is_binary(b""))

    def test_nul_byte_in_sample_marks_binary(self) -> None:
        self.assertTrue(is_binary(b"abc\x00def"))

    def test_nul_byte_past_sample_is_ignored(self) -> None:
        content = b"a" * BINARY_SAMPLE_SIZE + b"\x00"
        self.assertFalse(is_binary(content))
        self.assertTrue(is_binary(content, sample_size=BINARY_SAMPLE_SIZE + 1))

    def test_nul_byte_at_last_sampled_position_marks_binary(self) -> None:
        content = b"a" * (BINARY_SAMPLE_SIZE - 1) + b"\x00" + b"a" * 10
        self.assertTrue(is_binary(content))


if __name__ == "__main__":
    unittest.main()
