"""Tests for identifier generation."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from simplechat.ids import IdGenerator, generate_id


class IdGeneratorTests(unittest.TestCase):
    """Validate uniqueness of minted ids, with and without UUID support."""

    def test_generated_ids_are_unique(self) -> None:
        generator = IdGenerator()
        ids = {generator.generate() for _ in range(500)}
        self.assertEqual(len(ids), 500)

    def test_module_helper_returns_strings(self) -> None:
        self.assertIsInstance(generate_id(), str)
        self.assertNotEqual(generate_id(), generate_id())

    def test_fallback_used_when_uuid_source_fails(self) -> None:
        generator = IdGenerator()
        with patch("simplechat.ids.uuid.uuid4", side_effect=OSError("no entropy")):
            value = generator.generate()
        self.assertNotIn("-", value)
        self.assertTrue(value)

    def test_fallback_differs_within_same_millisecond(self) -> None:
        generator = IdGenerator()
        with patch("simplechat.ids.time.time", return_value=1_700_000_000.0):
            values = {generator.fallback() for _ in range(100)}
        self.assertEqual(len(values), 100)


if __name__ == "__main__":
    unittest.main()
