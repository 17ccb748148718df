"""Provide the interface to the source of desired access entries."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from github_access_provisioner.domain.entities import Entry


class EntriesReaderPort(ABC):
    """Port to read the ordered desired (repository, user, role, team) entries."""

    @abstractmethod
    def read_entries(self, path: Path) -> list["Entry"]:
        """Read every entry of the file, in file order.

        Raises:
            InputError: if the file is missing or malformed.

        """
