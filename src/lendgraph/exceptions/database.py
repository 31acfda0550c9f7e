import pathlib

from lendgraph.exceptions.base import LendgraphError


class BackupExists(LendgraphError):
    """
    Raised by `lendgraph database backup` if a file exists at the target path.
    """

    def __init__(self, path: pathlib.Path) -> None:
        self.path = path
        super().__init__(message=f"A backup at {path} already exists.")
