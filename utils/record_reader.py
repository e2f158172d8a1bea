# utils/record_reader.py
# This file is part of Sightline - Live Console Views
#
# CSV reader for console record files

import csv
from pathlib import Path
from typing import Iterator, Optional

from model.record import Level, Record, RecordKind, TaskState
from utils.logger import get_logger


class RecordFormatError(Exception):
    """Exception raised when record files contain invalid format or data."""

    pass


REQUIRED_HEADERS = {"id", "kind", "created_at"}


def read_records(filepath: str) -> Iterator[Record]:
    """Read records from a CSV record file.

    Each row holds one log message or network task. Columns that do not
    apply to a row's kind are left empty.

    Expected CSV format:
        id,kind,created_at,level,label,message,task_id,url,host,method,status_code,duration,state
        m1,log,1700000000.0,info,app,Started,,,,,,,
        t1,task,1700000001.5,,,,,https://api.example.com/v1/items,api.example.com,GET,200,0.42,success
        m2,log,1700000002.0,debug,network,GET /v1/items 200,t1,,,,,,

    Optional columns: level, label, message, session, task_id, url, host,
    method, status_code, error_code, duration, request_size,
    response_size, state.

    Args:
        filepath: Path to the CSV record file

    Yields:
        Record: Parsed records in file order

    Raises:
        RecordFormatError: If file format is invalid or records cannot be parsed
    """
    logger = get_logger()
    path = Path(filepath)

    if not path.exists():
        raise RecordFormatError(f"Record file not found: {filepath}")

    logger.debug(f"Reading record file: {filepath}")

    try:
        with open(path, "r", newline="", encoding="utf-8") as file:
            reader = csv.DictReader(file)

            headers = set(reader.fieldnames or [])
            if not REQUIRED_HEADERS.issubset(headers):
                missing = sorted(REQUIRED_HEADERS - headers)
                raise RecordFormatError(f"Missing required headers: {missing}")

            for row_num, row in enumerate(reader, start=2):
                try:
                    record = _parse_record_row(row)
                except (KeyError, ValueError) as e:
                    raise RecordFormatError(f"Error parsing row {row_num}: {e}")
                logger.debug(f"Parsed record {record.rid} from row {row_num}")
                yield record

    except RecordFormatError:
        raise
    except OSError as e:
        raise RecordFormatError(f"Cannot open record file: {filepath} ({e})")
    except csv.Error as e:
        raise RecordFormatError(f"Error reading record file: {e}")


def validate_record_file(filepath: str) -> int:
    """Validate record file format and id uniqueness.

    Parses every row so that format errors surface before the console
    starts.

    Args:
        filepath: Path to the record file to validate

    Returns:
        Number of records in the file

    Raises:
        RecordFormatError: If validation fails
    """
    logger = get_logger()
    logger.debug(f"Validating record file: {filepath}")

    seen = set()
    for record in read_records(filepath):
        if record.rid in seen:
            raise RecordFormatError(f"Duplicate record id: {record.rid}")
        seen.add(record.rid)

    logger.debug(f"Record validation successful: {len(seen)} records")
    return len(seen)


def _parse_record_row(row: dict) -> Record:
    """Parse a single CSV row into a Record.

    Raises:
        ValueError: If a value cannot be converted
    """
    rid = _text(row, "id")
    if not rid:
        raise ValueError("Empty id field")

    kind = RecordKind((_text(row, "kind") or "").lower())
    created_at = _number(row, "created_at", float)
    if created_at is None:
        raise ValueError("Empty created_at field")

    common = dict(
        rid=rid,
        kind=kind,
        created_at=created_at,
        session=_text(row, "session") or "",
    )

    if kind is RecordKind.LOG:
        level = _text(row, "level")
        return Record(
            **common,
            level=Level.from_name(level) if level else Level.INFO,
            label=_text(row, "label") or "default",
            message=_text(row, "message") or "",
            task_id=_text(row, "task_id"),
        )

    state = _text(row, "state")
    return Record(
        **common,
        url=_text(row, "url"),
        host=_text(row, "host"),
        method=(_text(row, "method") or "GET").upper(),
        status_code=_number(row, "status_code", int),
        error_code=_number(row, "error_code", int) or 0,
        duration=_number(row, "duration", float),
        request_size=_number(row, "request_size", int) or 0,
        response_size=_number(row, "response_size", int) or 0,
        state=TaskState(state.lower()) if state else TaskState.PENDING,
    )


def _text(row: dict, column: str) -> Optional[str]:
    """Stripped cell value, or None for a missing or empty cell."""
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _number(row: dict, column: str, convert):
    value = _text(row, column)
    if value is None:
        return None
    try:
        return convert(value)
    except ValueError:
        raise ValueError(f"Column {column!r} expects a number, got {value!r}")
