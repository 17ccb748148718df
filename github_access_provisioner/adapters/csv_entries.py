"""Read the desired access entries from a CSV file."""

import csv
from pathlib import Path

from pydantic import ValidationError

from github_access_provisioner.domain.entities import Entry
from github_access_provisioner.ports.entries import EntriesReaderPort
from github_access_provisioner.ports.errors import InputError

# header name (lower-cased) -> Entry field
HEADER_ALIASES = {
    "repository": "repository",
    "repo": "repository",
    "user": "subject",
    "username": "subject",
    "subject": "subject",
    "role": "role",
    "team": "team",
}
REQUIRED_FIELDS = ("repository", "subject")


class CsvEntriesReader(EntriesReaderPort):
    """Read entries from a CSV file with a header row.

    Examples:
        repository,user,role,team
        api-gateway,alice,Read,Platform Team
        api-gateway,bob,Write,Platform Team

    """

    def __init__(self, encoding: str = "utf-8-sig", delimiter: str = ","):
        """Initialize the reader."""
        self.encoding = encoding
        self.delimiter = delimiter

    @staticmethod
    def _map_header(header: list[str]) -> list[str | None]:
        columns = [HEADER_ALIASES.get(name.strip().lower()) for name in header]
        missing = [field for field in REQUIRED_FIELDS if field not in columns]
        if missing:
            raise InputError(
                f"Missing required column(s) {', '.join(missing)} in header {header}"
            )
        return columns

    def read_entries(self, path: Path) -> list[Entry]:
        """Read every entry of the file, in file order."""
        path = Path(path)
        if not path.is_file():
            raise InputError(f"Input file not found: {path}")

        entries: list[Entry] = []
        try:
            with path.open(encoding=self.encoding, newline="") as handle:
                reader = csv.reader(handle, delimiter=self.delimiter)
                header = next(reader, None)
                if header is None:
                    raise InputError(f"Input file is empty: {path}")
                columns = self._map_header(header)

                for row in reader:
                    if not any(cell.strip() for cell in row):
                        continue
                    if len(row) > len(columns):
                        raise InputError(
                            f"Malformed row at line {reader.line_num} of {path}: "
                            f"expected {len(columns)} columns, got {len(row)}"
                        )
                    values = {
                        column: cell
                        for column, cell in zip(columns, row)
                        if column is not None
                    }
                    try:
                        entries.append(Entry.model_validate(values))
                    except ValidationError as err:
                        raise InputError(
                            f"Invalid row at line {reader.line_num} of {path}: {err}"
                        ) from err
        except (OSError, UnicodeDecodeError, csv.Error) as err:
            raise InputError(f"Unable to read input file {path}: {err}") from err
        return entries
