"""Tests for caption text extraction."""

import pytest

from app.utils.captions import extract_caption_text


class TestExtractCaptionText:
    def test_empty(self):
        assert extract_caption_text(None) == ""
        assert extract_caption_text("") == ""

    def test_plain_text_is_unchanged(self):
        assert extract_caption_text("A red car") == "A red car"

    @pytest.mark.parametrize("key", ["<MORE_DETAILED_CAPTION>", "caption", "description"])
    def test_known_json_keys(self, key):
        assert extract_caption_text('{"%s": "A red car"}' % key) == "A red car"

    def test_first_string_value(self):
        assert extract_caption_text('{"score": 3, "text": "A red car"}') == "A red car"

    def test_json_without_strings(self):
        assert extract_caption_text('{"score": 3}') == '{"score": 3}'
        assert extract_caption_text("42") == "42"

    def test_python_dict_text(self):
        assert extract_caption_text("{'<MORE_DETAILED_CAPTION>': 'A red car'}") == "A red car"
