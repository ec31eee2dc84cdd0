"""Post export formatter tests"""

import json
from datetime import datetime

import pytest

from studioflow.core.export import (
    CSV_COLUMNS,
    default_export_filename,
    export_items,
    normalize_items,
    to_csv,
    to_json,
)

HEADER = ",".join(CSV_COLUMNS)


class TestNormalizeItems:
    def test_json_array_string(self):
        assert normalize_items('[{"a":1},{"a":2}]') == [{"a": 1}, {"a": 2}]

    def test_json_object_string_is_wrapped(self):
        assert normalize_items('{"a":1}') == [{"a": 1}]

    def test_list_with_json_string_elements(self):
        assert normalize_items(['{"a":1}', {"a": 2}]) == [{"a": 1}, {"a": 2}]

    def test_mapping_is_wrapped(self):
        assert normalize_items({"items": [1, 2]}) == [{"items": [1, 2]}]

    def test_exporter_result_unwrapped_on_request(self):
        assert normalize_items({"items": [{"a": 1}]}, unwrap_items=True) == [{"a": 1}]

    @pytest.mark.parametrize("value", ["not json", ["ok", "{broken"], None, 42])
    def test_unusable_values_become_empty(self, value):
        assert normalize_items(value) == []


class TestCsv:
    def test_sparse_record(self):
        csv = to_csv([{"product_id": "p1", "product_name": "Pulsera"}])
        assert csv == HEADER + '\n"p1","Pulsera","","","","","","","",""'

    def test_header_only_for_no_items(self):
        assert to_csv([]) == HEADER

    def test_quotes_doubled_and_line_breaks_collapsed(self):
        csv = to_csv([{"instagram_caption": 'Say "hola"\r\nto summer\nnow'}])
        row = csv.split("\n")[1]
        assert row.split(",")[4] == '"Say ""hola"" to summer now"'

    def test_hashtag_list_joined_with_spaces(self):
        csv = to_csv([{"suggested_hashtags": ["#artesania", "#nautico"]}])
        assert csv.split("\n")[1].endswith('"#artesania #nautico",""')

    def test_non_mapping_item_gives_empty_row(self):
        csv = to_csv(["loose text"])
        assert csv.split("\n")[1] == ",".join(['""'] * len(CSV_COLUMNS))


class TestExportItems:
    def test_json_is_pretty_and_unicode(self):
        payload = export_items([{"product_name": "Pulsera Náutica"}], "json")
        assert payload.extension == "json"
        assert payload.media_type.startswith("application/json")
        assert "Náutica" in payload.content
        assert payload.content == to_json([{"product_name": "Pulsera Náutica"}])
        assert json.loads(payload.content) == [{"product_name": "Pulsera Náutica"}]

    def test_csv_payload(self):
        payload = export_items([{"product_id": "p1"}], "csv")
        assert payload.extension == "csv"
        assert payload.media_type.startswith("text/csv")
        assert payload.content.startswith(HEADER)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="xml"):
            export_items([], "xml")


def test_default_filename():
    assert default_export_filename(datetime(2025, 3, 7, 9, 5, 1)) == "posts_2025-03-07-09-05-01"
