"""
Unit tests for extract decoding and legacy character remapping.
"""

import pytest

from lokalradar.registry.encoding import (
    LEGACY_CHAR_MAP,
    build_translation,
    decode_extract,
    remap_legacy_chars,
)


class TestRemapLegacyChars:
    """Tests for the legacy byte -> letter table."""

    @pytest.mark.parametrize(
        "code,letter",
        [
            (0x86, "å"),
            (0x8F, "Å"),
            (0x8D, "å"),
            (0x91, "æ"),
            (0x8E, "Æ"),
            (0x9B, "ø"),
            (0x9D, "Ø"),
            (0x9A, "Ø"),
        ],
    )
    def test_default_table(self, code, letter):
        assert remap_legacy_chars(f"x{chr(code)}y") == f"x{letter}y"

    def test_other_characters_untouched(self):
        text = "Storgata 1, 0150 OSLO é ü"
        assert remap_legacy_chars(text) == text

    def test_custom_table(self):
        assert remap_legacy_chars("a\x86b", {0x86: "?"}) == "a?b"

    def test_empty_table_disables_remap(self):
        assert remap_legacy_chars("a\x86b", {}) == "a\x86b"

    def test_table_keys_must_be_bytes(self):
        with pytest.raises(ValueError):
            build_translation({0x1F600: "x"})

    def test_default_covers_observed_bytes(self):
        assert set(LEGACY_CHAR_MAP) == {0x86, 0x8D, 0x8E, 0x8F, 0x91, 0x9A, 0x9B, 0x9D}


class TestDecodeExtract:
    """Tests for byte decoding."""

    def test_utf8(self):
        assert decode_extract("Tromsø".encode("utf-8")) == "Tromsø"

    def test_latin1_fallback(self):
        assert decode_extract("Tromsø".encode("latin-1")) == "Tromsø"

    def test_legacy_bytes(self):
        assert decode_extract(b"TROMS\x9d;BOD\x9d;Fj\x91ra") == "TROMSØ;BODØ;Fjæra"

    def test_str_passthrough(self):
        assert decode_extract("Orgnr;Navn") == "Orgnr;Navn"

    def test_byte_order_mark(self):
        assert decode_extract(b"\xef\xbb\xbfOrgnr") == "Orgnr"

    def test_remap_disabled(self):
        assert decode_extract(b"a\x86b", remap=False) == "a\x86b"
