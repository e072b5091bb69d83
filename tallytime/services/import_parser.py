"""Parser for the "Import Clients" text box.

Accepts a JSON client list (bare array or a full backup object with a
``clients`` array) or CSV lines of ``Name,Rate``. Only names and hourly rates
are read - historical entries and IDs in a backup are ignored.

The parser never raises: it returns a ParseResult carrying either the parsed
clients or a ParseError whose kind tells the caller what went wrong.
"""
import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from config import CSV_HEADER_HINTS

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")


class ParseErrorKind(Enum):
    EMPTY = "empty"
    NOT_JSON = "not_json"
    UNSUPPORTED_SHAPE = "unsupported_shape"
    NO_CLIENTS = "no_clients"
    NOT_CSV = "not_csv"


@dataclass
class ParseError:
    kind: ParseErrorKind
    detail: str = ""


HINTS = {
    ParseErrorKind.EMPTY: "Please enter client data to import",
    ParseErrorKind.NOT_JSON: "Invalid JSON. Check the brackets and quotes and try again.",
    ParseErrorKind.UNSUPPORTED_SHAPE: "JSON must be a list of clients or a backup with a 'clients' list",
    ParseErrorKind.NO_CLIENTS: "No clients with a name were found",
    ParseErrorKind.NOT_CSV: "Use one client per line: Client Name, Hourly Rate",
}


class ClientImportError(Exception):
    """Raised when pasted import text cannot be turned into clients."""

    def __init__(self, error: ParseError) -> None:
        message = HINTS.get(error.kind, "Could not import clients")
        super().__init__(message)
        self.error = error


@dataclass
class ImportedClient:
    name: str
    hourly_rate: float = 0.0


@dataclass
class ParseResult:
    clients: List[ImportedClient] = field(default_factory=list)
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_rate(value: Any) -> float:
    """Read the leading number of a value, 0 when there is none."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0
    if not isinstance(value, str):
        return 0.0
    match = _LEADING_NUMBER.match(value.strip())
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def _strip_quotes(column: str) -> str:
    return _SURROUNDING_QUOTES.sub("", column.strip())


def parse_csv(text: str) -> ParseResult:
    """Parse ``Name,Rate`` lines. A first line mentioning name/client/rate is a header."""
    lines = [line.strip() for line in text.strip().splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return ParseResult(error=ParseError(ParseErrorKind.EMPTY))

    first = lines[0].lower()
    has_header = any(hint in first for hint in CSV_HEADER_HINTS)
    rows = lines[1:] if has_header else lines

    clients = []
    for line in rows:
        columns = [_strip_quotes(col) for col in line.split(",")]
        if not columns[0]:
            continue
        rate = parse_rate(columns[1]) if len(columns) >= 2 else 0.0
        clients.append(ImportedClient(name=columns[0], hourly_rate=rate))

    if not clients:
        return ParseResult(error=ParseError(ParseErrorKind.NOT_CSV, "No valid clients found in CSV"))
    return ParseResult(clients=clients)


def _from_json_data(data: Any) -> ParseResult:
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("clients"), list):
        items = data["clients"]
    else:
        return ParseResult(error=ParseError(
            ParseErrorKind.UNSUPPORTED_SHAPE,
            "Expected a list of clients or an object with a 'clients' list",
        ))

    clients = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        rate = parse_rate(item.get("hourlyRate")) or parse_rate(item.get("hourly_rate"))
        clients.append(ImportedClient(name=name.strip(), hourly_rate=rate))

    if not clients:
        return ParseResult(error=ParseError(ParseErrorKind.NO_CLIENTS, "No clients with a name found"))
    return ParseResult(clients=clients)


def parse_client_list(text: str) -> ParseResult:
    """Parse pasted import text, trying strict JSON first and CSV second."""
    trimmed = (text or "").strip()
    if not trimmed:
        return ParseResult(error=ParseError(ParseErrorKind.EMPTY))

    try:
        data = json.loads(trimmed)
    except ValueError as e:
        if trimmed.startswith(("{", "[")):
            return ParseResult(error=ParseError(ParseErrorKind.NOT_JSON, str(e)))
        return parse_csv(trimmed)
    return _from_json_data(data)
