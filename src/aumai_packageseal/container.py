"""Read access to zip-format package containers."""

from __future__ import annotations

import zipfile
from pathlib import Path, PurePosixPath
from types import TracebackType

from aumai_packageseal.errors import NotFoundError, PackageIOError


class PackageContainer:
    """An open zip archive with exact-name entry lookup and safe extraction.

    Use :meth:`open` to create one, preferably as a context manager::

        with PackageContainer.open("plugin.pkg") as container:
            entry = container.find_entry("manifest.json")
    """

    def __init__(self, path: Path, archive: zipfile.ZipFile) -> None:
        self._path = path
        self._archive = archive

    @classmethod
    def open(cls, path: str | Path) -> PackageContainer:
        """Open the zip container at *path*.

        Raises:
            NotFoundError: if *path* does not exist.
            PackageIOError: if *path* cannot be read or is not a zip archive.
        """
        container_path = Path(path)
        if not container_path.exists():
            raise NotFoundError(f"Package file '{container_path}' does not exist.")
        try:
            archive = zipfile.ZipFile(container_path)
        except (OSError, zipfile.BadZipFile) as exc:
            raise PackageIOError(
                f"Unable to open package '{container_path.name}': {exc}"
            ) from exc
        return cls(container_path, archive)

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        self._archive.close()

    def __enter__(self) -> PackageContainer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def find_entry(self, name: str) -> zipfile.ZipInfo | None:
        """Return the first file entry whose base name is exactly *name*."""
        for info in self._archive.infolist():
            if info.is_dir():
                continue
            if PurePosixPath(info.filename).name == name:
                return info
        return None

    def read_bytes(self, entry: zipfile.ZipInfo) -> bytes:
        """Read the full content of *entry*.

        Raises:
            PackageIOError: if the entry cannot be read.
        """
        try:
            return self._archive.read(entry)
        except (OSError, zipfile.BadZipFile) as exc:
            raise PackageIOError(
                f"Unable to read '{entry.filename}' from package '{self._path.name}': {exc}"
            ) from exc

    def extract_all(self, destination: str | Path) -> None:
        """Extract every entry beneath *destination*, creating it if needed.

        Raises:
            PackageIOError: if an entry would be written outside *destination*
                or any write fails.
        """
        target = Path(destination)
        try:
            target.mkdir(parents=True, exist_ok=True)
            root = target.resolve()
            for info in self._archive.infolist():
                resolved = (root / info.filename).resolve()
                if resolved != root and root not in resolved.parents:
                    raise PackageIOError(
                        f"Entry '{info.filename}' in package '{self._path.name}' "
                        "would be extracted outside the destination directory."
                    )
            self._archive.extractall(root)
        except (OSError, zipfile.BadZipFile) as exc:
            raise PackageIOError(
                f"Unable to extract package '{self._path.name}' to '{target}': {exc}"
            ) from exc


__all__ = ["PackageContainer"]
