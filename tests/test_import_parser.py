"""Tests for parsing pasted client import text."""
import json

import pytest

from services.import_parser import (
    HINTS,
    ClientImportError,
    ImportedClient,
    ParseErrorKind,
    parse_client_list,
    parse_csv,
    parse_rate,
)


class TestParseRate:
    @pytest.mark.parametrize("value, expected", [
        ("75", 75.0),
        ("75.50", 75.5),
        (" 80/hr", 80.0),
        ("$75", 0.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (120, 120.0),
        (float("nan"), 0.0),
    ])
    def test_leading_number(self, value, expected):
        assert parse_rate(value) == expected


class TestCsv:
    def test_without_header(self):
        result = parse_client_list("Acme Corp,75\nGlobex,120.5")
        assert result.ok
        assert result.clients == [
            ImportedClient("Acme Corp", 75.0),
            ImportedClient("Globex", 120.5),
        ]

    def test_header_row_skipped(self):
        result = parse_client_list("Client Name, Hourly Rate\nAcme,50")
        assert result.clients == [ImportedClient("Acme", 50.0)]

    def test_quotes_and_whitespace_stripped(self):
        result = parse_csv('  "Acme" , "90"  \n\n\'Initech\',40')
        assert result.clients == [
            ImportedClient("Acme", 90.0),
            ImportedClient("Initech", 40.0),
        ]

    def test_missing_rate_is_zero(self):
        result = parse_csv("Acme")
        assert result.clients == [ImportedClient("Acme", 0.0)]

    def test_rows_without_name_skipped(self):
        result = parse_csv(",50\nAcme,10")
        assert result.clients == [ImportedClient("Acme", 10.0)]

    def test_only_header_is_error(self):
        result = parse_csv("name,rate")
        assert not result.ok
        assert result.error.kind is ParseErrorKind.NOT_CSV


class TestJson:
    def test_bare_array(self):
        text = json.dumps([{"name": "Acme", "hourlyRate": 75}, {"name": "Globex"}])
        result = parse_client_list(text)
        assert result.clients == [
            ImportedClient("Acme", 75.0),
            ImportedClient("Globex", 0.0),
        ]

    def test_backup_object_ignores_entries(self):
        backup = {
            "clients": [{
                "id": "old-id",
                "name": "  Acme  ",
                "hourlyRate": 60,
                "archived": True,
                "timeEntries": [{"id": "e1", "startTime": 1, "endTime": 2}],
            }],
            "selectedClientId": "old-id",
            "exportDate": "2026-10-01T00:00:00Z",
        }
        result = parse_client_list(json.dumps(backup))
        assert result.clients == [ImportedClient("Acme", 60.0)]

    def test_snake_case_rate(self):
        result = parse_client_list('[{"name": "Acme", "hourly_rate": "45"}]')
        assert result.clients == [ImportedClient("Acme", 45.0)]

    def test_nameless_items_skipped(self):
        result = parse_client_list('[{"hourlyRate": 10}, "text", {"name": "Acme"}]')
        assert result.clients == [ImportedClient("Acme", 0.0)]


class TestErrors:
    @pytest.mark.parametrize("text", ["", "   \n  ", None])
    def test_empty(self, text):
        result = parse_client_list(text)
        assert result.error.kind is ParseErrorKind.EMPTY

    def test_broken_json(self):
        result = parse_client_list('[{"name": "Acme"')
        assert result.error.kind is ParseErrorKind.NOT_JSON

    def test_unsupported_shape(self):
        result = parse_client_list('{"name": "Acme"}')
        assert result.error.kind is ParseErrorKind.UNSUPPORTED_SHAPE

    def test_no_named_clients(self):
        result = parse_client_list('[{"hourlyRate": 10}]')
        assert result.error.kind is ParseErrorKind.NO_CLIENTS

    def test_every_kind_has_a_hint(self):
        assert set(HINTS) == set(ParseErrorKind)

    def test_import_error_uses_hint(self):
        result = parse_client_list('{"clients": "nope"}')
        error = ClientImportError(result.error)
        assert str(error) == HINTS[ParseErrorKind.UNSUPPORTED_SHAPE]
        assert error.error is result.error
