"""
Tests for the bot's message formatting helpers.
"""

from bot.helpers import format_attributes, image_caption, photo_url


class TestImageCaption:

    def test_caption_with_metadata_and_tags(self):
        image = {
            "title": "First Look",
            "tags": ["ceremony", "golden-hour"],
            "metadata": {"camera": "Canon EOS R5", "aperture": "f/1.8", "iso": 200},
        }
        assert image_caption(image, "Wedding Photography") == (
            "First Look | Wedding Photography\n"
            "📷 Canon EOS R5 · f/1.8 · ISO 200\n"
            "🏷️ Tags: ceremony, golden-hour"
        )

    def test_caption_without_details(self):
        assert image_caption({"title": "", "tags": [], "metadata": None}) == "Untitled"


class TestFormatAttributes:

    def test_most_common_values_first(self):
        attributes = {
            "tags": [
                {"id": "a", "label": "a", "count": 1},
                {"id": "b", "label": "b", "count": 3},
            ],
            "cameras": [],
        }
        assert format_attributes(attributes) == "🏷️ Tags\n- b (3)\n- a (1)"

    def test_top_limits_entries(self):
        attributes = {"iso_values": [{"id": str(i), "label": str(i), "count": i} for i in range(1, 4)]}
        assert format_attributes(attributes, top=1) == "🎞️ ISO\n- 3 (3)"

    def test_empty_attributes(self):
        assert format_attributes({}) == ""


class TestPhotoUrl:

    def test_prefers_delivery_url(self):
        assert photo_url({"delivery_url": "https://cdn/x", "image_path": "https://store/x"}) == "https://cdn/x"

    def test_falls_back_to_stored_url(self):
        assert photo_url({"delivery_url": "", "image_path": "https://store/x"}) == "https://store/x"
