"""Tests for the postal code table."""

from ridejob.form.validators import normalize_postal_code
from ridejob.integrations.postcode import PostcodeTable


class TestPostcodeTable:
    """Tests for PostcodeTable."""

    def test_lookup(self, postcode_file):
        table = PostcodeTable(postcode_file)
        assert table.get_prefecture("1010051") == "東京都"
        assert table.get_prefecture("5320011") == "大阪府"

    def test_integer_codes_are_zero_padded(self, postcode_file):
        """Test codes stored without their leading zero still resolve."""
        table = PostcodeTable(postcode_file)
        assert table.get_prefecture("0600000") == "北海道"

    def test_hyphenated_and_plain_input_agree(self, postcode_file):
        table = PostcodeTable(postcode_file)
        assert table.get_prefecture(normalize_postal_code("101-0051")) == table.get_prefecture(
            normalize_postal_code("1010051")
        )

    def test_non_seven_digit_code_misses(self, postcode_file):
        table = PostcodeTable(postcode_file)
        assert table.get_prefecture("101005") is None
        assert table.get_prefecture("101-0051") is None

    def test_file_read_once(self, postcode_file):
        table = PostcodeTable(postcode_file)
        table.load()
        postcode_file.write_text("[]", encoding="utf-8")

        assert table.get_prefecture("1010051") == "東京都"

    def test_missing_file_yields_empty_table(self, tmp_path, caplog):
        table = PostcodeTable(tmp_path / "missing.json")

        assert table.load() == {}
        assert table.get_prefecture("1010051") is None
        assert "Failed to load postcode data" in caplog.text

    def test_malformed_file_yields_empty_table(self, tmp_path):
        path = tmp_path / "ken_all.json"
        path.write_text("{not json", encoding="utf-8")

        assert PostcodeTable(path).load() == {}
