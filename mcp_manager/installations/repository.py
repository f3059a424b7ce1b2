from pathlib import Path

from mcp_manager.errors import InvalidJsonFormatError, InvalidStoreSchemaError
from mcp_manager.installations.interfaces import IInstallationRepository
from mcp_manager.models import ServerInstallation
from mcp_manager.schemas import (
    INSTALLATIONS_SCHEMA,
    format_schema_error,
    schema_validator,
)
from mcp_manager.utils import read_json_safe, write_json


class InMemoryInstallationRepository(IInstallationRepository):
    """Installation records kept in a list.

    Pass the same ``installations`` list to several repositories (or share one
    repository) to let UI handlers and background syncs observe one state.
    Records handed out are never changed by the repository; ``save`` swaps in
    the record with the same id.
    """

    def __init__(self, installations: list[ServerInstallation] | None = None) -> None:
        self._installations = installations if installations is not None else []

    def list_all(self) -> list[ServerInstallation]:
        return list(self._installations)

    def add(self, installation: ServerInstallation) -> None:
        self._installations.append(installation)

    def save(self, installation: ServerInstallation) -> None:
        for index, current in enumerate(self._installations):
            if current.id == installation.id:
                self._installations[index] = installation
                return
        self._installations.append(installation)

    def remove(self, installation_id: str) -> bool:
        for index, installation in enumerate(self._installations):
            if installation.id == installation_id:
                del self._installations[index]
                return True
        return False


class JsonInstallationRepository(InMemoryInstallationRepository):
    """Installation records persisted to ``installations.json``.

    A change only stays in memory once the file write succeeded.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        super().__init__(self._load())

    @property
    def path(self) -> Path:
        return self._path

    def add(self, installation: ServerInstallation) -> None:
        previous = list(self._installations)
        super().add(installation)
        self._commit(previous)

    def save(self, installation: ServerInstallation) -> None:
        previous = list(self._installations)
        super().save(installation)
        self._commit(previous)

    def remove(self, installation_id: str) -> bool:
        previous = list(self._installations)
        removed = super().remove(installation_id)
        if removed:
            self._commit(previous)
        return removed

    def _load(self) -> list[ServerInstallation]:
        payload, error = read_json_safe(self._path)
        if error is not None:
            raise InvalidJsonFormatError(self._path, error)
        if payload is None:
            return []
        issue = next(iter(schema_validator(INSTALLATIONS_SCHEMA).iter_errors(payload)), None)
        if issue is not None:
            raise InvalidStoreSchemaError(self._path, format_schema_error(issue))
        return [ServerInstallation.from_dict(item) for item in payload["installations"]]

    def _commit(self, previous: list[ServerInstallation]) -> None:
        try:
            write_json(
                self._path,
                {"installations": [item.as_dict() for item in self._installations]},
            )
        except OSError:
            self._installations[:] = previous
            raise
