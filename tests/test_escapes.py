"""Tests for .properties escape decoding, encoding and comment formatting."""

import pytest

from propcodec.errors import (
    DecodeError,
    InvalidHexDigit,
    InvalidLowSurrogate,
    InvalidTextEncoding,
    TruncatedUnicodeEscape,
    UnpairedHighSurrogate,
)
from propcodec.properties.escapes import (
    ESCAPE_ERRORS,
    decode_escapes,
    escape,
    format_comments,
    unicode_escape,
)


class TestDecodeEscapes:
    """Tests for decode_escapes."""

    def test_plain_text(self):
        """Test bytes without escapes pass through."""
        assert decode_escapes(b"hello world") == "hello world"

    def test_short_escapes(self):
        """Test \\t, \\r, \\n and \\f."""
        assert decode_escapes(b"\\th\\re\\nl\\fl") == "\th\re\nl\x0cl"

    def test_unknown_escapes_drop_backslash(self):
        """Test that other escaped characters stand for themselves."""
        assert decode_escapes(b"\\=\\:\\#\\!\\ \\\\\\b") == "=:#! \\b"

    def test_unicode_escapes(self):
        """Test BMP escapes and a surrogate pair."""
        data = b"\\u4F60\\u597D\\u00A9\\uD83C\\uDF10"
        assert decode_escapes(data) == "你好©🌐"

    def test_unicode_escapes_lowercase(self):
        """Test that hex digits are case-insensitive."""
        data = b"\\u4f60\\u597d\\u00a9\\ud83c\\udf10"
        assert decode_escapes(data) == "你好©🌐"

    def test_literal_utf8(self):
        """Test literal multi-byte characters are decoded as UTF-8."""
        assert decode_escapes("你好🌐".encode("utf-8")) == "你好🌐"

    def test_mixed_literal_and_escapes(self):
        """Test literal runs around unicode escapes."""
        data = "é\\u0041é".encode("utf-8")
        assert decode_escapes(data) == "éAé"

    def test_trailing_backslash_dropped(self):
        """Test a lone trailing backslash is ignored."""
        assert decode_escapes(b"ab\\") == "ab"

    def test_latin1_encoding(self):
        """Test literal bytes decoded with another encoding."""
        assert decode_escapes(b"caf\xe9", encoding="latin-1") == "café"

    def test_invalid_hex_digit(self):
        """Test a non-hex character in a unicode escape."""
        with pytest.raises(InvalidHexDigit) as exc_info:
            decode_escapes(b"\\u4xyz")
        assert exc_info.value.char == "x"
        assert str(exc_info.value).startswith("parse unicode failed, invalid char")

    def test_truncated_escape(self):
        """Test fewer than 4 hex digits."""
        with pytest.raises(TruncatedUnicodeEscape) as exc_info:
            decode_escapes(b"\\u4f6")
        assert exc_info.value.available == 3

    def test_high_surrogate_without_trail(self):
        """Test a high surrogate followed by something other than \\u."""
        with pytest.raises(UnpairedHighSurrogate) as exc_info:
            decode_escapes(b"\\ud83c\\more data")
        assert exc_info.value.unit == 0xD83C

    def test_high_surrogate_at_end(self):
        """Test a high surrogate at the end of the span."""
        with pytest.raises(UnpairedHighSurrogate):
            decode_escapes(b"\\ud83c")

    def test_truncated_trail_surrogate(self):
        """Test a trail escape with only 3 hex digits."""
        with pytest.raises(TruncatedUnicodeEscape):
            decode_escapes(b"\\ud83c\\ue00")

    @pytest.mark.parametrize("data, unit", [
        (b"\\ud83c\\uda00", 0xDA00),
        (b"\\ud83c\\ue000", 0xE000),
    ])
    def test_invalid_trail_surrogate(self, data, unit):
        """Test a trail unit outside [DC00, DFFF]."""
        with pytest.raises(InvalidLowSurrogate) as exc_info:
            decode_escapes(data)
        assert exc_info.value.unit == unit
        assert "after lead surrogate" in str(exc_info.value)

    def test_lone_low_surrogate(self):
        """Test a low surrogate without a preceding high surrogate is kept."""
        assert decode_escapes(b"a\\udc00b") == "a\udc00b"

    def test_lone_low_surrogate_reescaped(self):
        """Test a lone low surrogate survives escape then decode."""
        escaped = escape("a\udc00b", escape_unicode=True)
        assert escaped == "a\\uDC00b"
        assert decode_escapes(escaped.encode("ascii")) == "a\udc00b"

    def test_invalid_utf8(self):
        """Test bytes that are not valid UTF-8."""
        with pytest.raises(InvalidTextEncoding):
            decode_escapes(b"\xff\xfe")

    def test_errors_are_value_errors(self):
        """Test decode errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode_escapes(b"\\uzzzz")
        assert issubclass(InvalidHexDigit, DecodeError)


class TestUnicodeEscape:
    """Tests for unicode_escape."""

    def test_bmp(self):
        """Test a BMP code point uses uppercase hex."""
        assert unicode_escape(0x4F60) == "\\u4F60"
        assert unicode_escape(0x01) == "\\u0001"

    def test_supplementary(self):
        """Test a supplementary code point is split, high surrogate first."""
        assert unicode_escape(0x1F310) == "\\uD83C\\uDF10"

    def test_codec_error_handler(self):
        """Test unencodable characters are escaped when encoding."""
        assert "a你🌐".encode("latin-1", errors=ESCAPE_ERRORS) == b"a\\u4F60\\uD83C\\uDF10"
        assert "é".encode("latin-1", errors=ESCAPE_ERRORS) == b"\xe9"


class TestEscape:
    """Tests for escape."""

    def test_key_spaces(self):
        """Test all spaces in a key are escaped."""
        assert escape(" a 1 ", escape_space=True) == "\\ a\\ 1\\ "

    def test_value_leading_space(self):
        """Test only the leading space of a value is escaped."""
        assert escape(" b c ", escape_space=False) == "\\ b c "

    def test_backslash(self):
        """Test backslashes are doubled."""
        assert escape("\\b") == "\\\\b"

    def test_special_characters(self):
        """Test control characters and separators."""
        assert escape("\t\n\r\x0c=:#!b") == "\\t\\n\\r\\f\\=\\:\\#\\!b"

    def test_non_ascii_literal(self):
        """Test non-ASCII characters are kept when not escaping unicode."""
        assert escape("你好🌐") == "你好🌐"
        assert escape("\x01") == "\x01"

    def test_escape_unicode(self):
        """Test non-ASCII characters and surrogate pairs."""
        assert escape("你好🌐", escape_unicode=True) == "\\u4F60\\u597D\\uD83C\\uDF10"

    def test_escape_unicode_control(self):
        """Test control characters below 0x20 with escape_unicode."""
        assert escape("\x01Hello", escape_unicode=True) == "\\u0001Hello"
        assert escape("\x7f", escape_unicode=True) == "\\u007F"

    def test_printable_ascii_untouched(self):
        """Test printable ASCII below '>' other than specials is literal."""
        assert escape('"$%&()*+,-./0<', escape_unicode=True) == '"$%&()*+,-./0<'

    @pytest.mark.parametrize("text", [
        " a 1 ",
        "tab\tnew\nline\rfeed\x0c",
        "sep=ar:at#or!s",
        "back\\slash\\",
        "你好©🌐",
        "\x01\x7f",
    ])
    @pytest.mark.parametrize("escape_unicode", [False, True])
    def test_roundtrip(self, text, escape_unicode):
        """Test that decoding an escaped string reproduces it."""
        for escape_space in (False, True):
            escaped = escape(text, escape_space, escape_unicode)
            assert decode_escapes(escaped.encode("utf-8")) == text


class TestFormatComments:
    """Tests for format_comments."""

    def test_single_line(self):
        """Test a one-line comment."""
        assert format_comments("Hello") == "#Hello\n"

    def test_multi_line(self):
        """Test each line gets a # prefix."""
        assert format_comments("Hello\n你好©🌐") == "#Hello\n#你好©🌐\n"

    def test_escape_unicode(self):
        """Test code points above 0x7F are escaped."""
        result = format_comments("Hello\n你好©🌐", escape_unicode=True)
        assert result == "#Hello\n#\\u4F60\\u597D\\u00A9\\uD83C\\uDF10\n"

    def test_control_characters_kept(self):
        """Test characters below 0x80 are never escaped in comments."""
        assert format_comments("a\x01=b\\", escape_unicode=True) == "#a\x01=b\\\n"

    def test_line_endings_normalized(self):
        """Test \\r\\n, \\r and \\n are all replaced with the configured ending."""
        assert format_comments("a\r\nb\rc\nd", line_ending="\r\n") == "#a\r\n#b\r\n#c\r\n#d\r\n"

    def test_existing_hash_kept(self):
        """Test no extra # is inserted before a line that has one."""
        assert format_comments("a\n#b") == "#a\n#b\n"

    def test_trailing_newline(self):
        """Test a trailing terminator produces an empty comment line."""
        assert format_comments("a\n") == "#a\n#\n"
