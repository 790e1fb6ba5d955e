import json
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path

from core.utils.json_serializers import json_serializer


class Color(Enum):
    RED = "red"


@dataclass
class Entry:
    name: str
    size: int


class SampleObj:
    def __str__(self):
        return "sample"


# =========================================================================
# json_serializer
# =========================================================================


class TestJsonSerializer:

    def test_serializes_datetime_to_isoformat(self):
        assert json_serializer(datetime(2025, 6, 15, 10, 30, 0)) == "2025-06-15T10:30:00"

    def test_serializes_date_to_isoformat(self):
        assert json_serializer(date(2025, 12, 25)) == "2025-12-25"

    def test_serializes_enum_to_value(self):
        assert json_serializer(Color.RED) == "red"

    def test_serializes_path(self):
        assert json_serializer(Path("cattos/sticker_1.webp")) == "cattos/sticker_1.webp"

    def test_serializes_sets_sorted(self):
        assert json_serializer({"b", "a"}) == ["a", "b"]
        assert json_serializer(frozenset({"top30"})) == ["top30"]

    def test_bytes_are_never_dumped(self):
        assert json_serializer(b"\x00" * 5) == "<5 bytes>"

    def test_serializes_dataclass(self):
        assert json_serializer(Entry("sticker_1.webp", 10)) == {"name": "sticker_1.webp", "size": 10}

    def test_fallback_to_str(self):
        assert json_serializer(SampleObj()) == "sample"

    def test_works_as_json_default(self):
        payload = {"when": datetime(2025, 1, 1), "tags": {"x"}}
        assert json.loads(json.dumps(payload, default=json_serializer)) == {
            "when": "2025-01-01T00:00:00",
            "tags": ["x"],
        }
