"""Tests for kana conversion."""

from unittest.mock import MagicMock, patch

import pytest

from ridejob.form.kana import PykakasiConverter


class TestPykakasiConverter:
    """Tests for PykakasiConverter."""

    @pytest.mark.asyncio
    async def test_converts_kanji_to_hiragana(self):
        """Test a real conversion through pykakasi."""
        converter = PykakasiConverter()
        assert await converter.convert("山田") == "やまだ"

    @pytest.mark.asyncio
    async def test_blank_input_returns_empty(self):
        converter = PykakasiConverter()
        assert await converter.convert("   ") == ""

    @pytest.mark.asyncio
    async def test_converter_created_once(self):
        """Test the kakasi instance is reused across calls."""
        fake = MagicMock()
        fake.convert.return_value = [{"hira": "た"}, {"hira": "ろう"}]

        with patch("ridejob.form.kana.pykakasi.kakasi", return_value=fake) as factory:
            converter = PykakasiConverter()
            assert await converter.convert("太郎") == "たろう"
            assert await converter.convert("太郎") == "たろう"

        factory.assert_called_once()

    @pytest.mark.asyncio
    async def test_init_failure_yields_no_suggestion(self):
        """Test a failed initialization is not retried and returns ""."""
        with patch("ridejob.form.kana.pykakasi.kakasi", side_effect=RuntimeError("no dict")) as factory:
            converter = PykakasiConverter()
            assert await converter.convert("山田") == ""
            assert await converter.convert("太郎") == ""

        factory.assert_called_once()

    @pytest.mark.asyncio
    async def test_conversion_error_yields_no_suggestion(self):
        fake = MagicMock()
        fake.convert.side_effect = ValueError("bad input")

        with patch("ridejob.form.kana.pykakasi.kakasi", return_value=fake):
            converter = PykakasiConverter()
            assert await converter.convert("山田") == ""
