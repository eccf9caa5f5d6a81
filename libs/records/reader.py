"""CSV record source.

Reads a delimited file with a header row and yields one ``Record`` per data
row. Iteration is lazy; each new iteration reopens the file.
"""

import csv
from pathlib import Path
from typing import Dict, Iterator, List, Union

import structlog

logger = structlog.get_logger("records.reader")

Record = Dict[str, str]


class RecordSourceError(Exception):
    """The record source could not be opened or parsed."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Cannot read records from {path}: {reason}")
        self.path = str(path)
        self.reason = reason

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": type(self).__name__,
            "path": self.path,
            "message": str(self),
        }


def _row_to_record(header: List[str], row: List[str]) -> Record:
    record = {}
    for index, value in enumerate(row):
        # Values past the header get positional keys
        key = header[index] if index < len(header) else f"_{index}"
        record[key] = value
    for name in header[len(row):]:
        record[name] = ""
    return record


class CsvRecordSource:
    """Iterable view over a CSV file.

    Parameters
    - path: Location of the file
    - delimiter: Field separator
    - encoding: Text encoding; the default strips a UTF-8 byte-order mark
    """

    def __init__(
        self,
        path: Union[str, Path],
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
    ):
        self.path = Path(path)
        self.delimiter = delimiter
        self.encoding = encoding

    def __iter__(self) -> Iterator[Record]:
        try:
            f = open(self.path, "r", encoding=self.encoding, newline="")
        except OSError as e:
            logger.error("Failed to open record source", path=str(self.path), error=str(e))
            raise RecordSourceError(self.path, e.strerror or str(e)) from e

        with f:
            try:
                reader = csv.reader(f, delimiter=self.delimiter)
                header = next(reader, None)
                if header is None:
                    return
                for row in reader:
                    if not row:
                        continue
                    yield _row_to_record(header, row)
            except (csv.Error, UnicodeDecodeError) as e:
                logger.error("Failed to parse record source", path=str(self.path), error=str(e))
                raise RecordSourceError(self.path, str(e)) from e


def read_records(
    path: Union[str, Path],
    delimiter: str = ",",
    encoding: str = "utf-8-sig",
) -> Iterator[Record]:
    """Lazily read records from ``path``; errors surface on first ``next()``."""
    return iter(CsvRecordSource(path, delimiter=delimiter, encoding=encoding))
