"""
Thread-safe store of open audio files.

FileStore holds the list of files a user is editing, which one is
current, and whether each has unsaved changes. It is the state behind a
tag editor window: the UI calls one method per user action and redraws
from get_app() / get_page() snapshots.

All public methods acquire self._lock for their whole duration, so calls
from a UI thread and worker threads never interleave. Listeners
registered with subscribe() receive a CommandEvent after every fallible
command, once the lock has been released.

Usage:
    store = FileStore()
    store.subscribe(lambda event: print(event.command, event.ok))

    store.open_files([Path("a.mp3"), Path("b.flac")])
    store.set_field("title", "New title")
    store.set_image(0, Path("cover.png"))
    store.save_file(store.current_index)
"""

import shutil
import threading
from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mr_tagger.commands import (
    get_field_view,
    get_picture,
    open_metadata,
    remove_picture,
    save_metadata,
    set_picture,
)
from mr_tagger.core.config import Config
from mr_tagger.core.exceptions import (
    IndexOutOfRangeError,
    InvalidImageError,
    MrTaggerError,
    SerializeError,
)
from mr_tagger.core.logger import get_logger
from mr_tagger.metadata.facade import Metadata
from mr_tagger.metadata.models import Picture

logger = get_logger(__name__)


@dataclass
class OpenFile:
    """
    One open file.

    Attributes:
        path: Where the file lives; changes after a successful save-as.
        metadata: The in-memory tag, mutated by every edit.
        dirty: True when metadata has changes not yet written to path.
    """

    path: Path
    metadata: Metadata
    dirty: bool = False


@dataclass(frozen=True)
class CommandEvent:
    """
    Outcome of a store command, delivered to subscribers.

    Attributes:
        command: Name of the FileStore method, e.g. "save_file".
        ok: Whether the command succeeded.
        error: The raised error when ok is False.
    """

    command: str
    ok: bool
    error: MrTaggerError | None = None


Listener = Callable[[CommandEvent], None]


class FileStore:
    """
    Thread-safe list of open files with a current-file pointer.

    Picture and field commands act on the current file. Every successful
    mutation marks that file dirty; a successful save clears the flag.
    """

    def __init__(self, config: Config | None = None) -> None:
        """
        Args:
            config: Application configuration; tag settings are applied
                    when files are opened. Defaults apply when None.
        """
        self.config = config or Config()
        self._lock = threading.Lock()
        self._files: list[OpenFile] = []
        self._current_index = 0
        self._listeners: list[Listener] = []

    # Internal helpers (caller holds the lock)

    @contextmanager
    def _command(self, name: str) -> Generator[None, None, None]:
        """Run a command body under the lock, then notify listeners."""
        try:
            with self._lock:
                yield
        except MrTaggerError as e:
            self._emit(CommandEvent(command=name, ok=False, error=e))
            raise
        self._emit(CommandEvent(command=name, ok=True))

    def _emit(self, event: CommandEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed for {event.command} event")

    def _file_at(self, index: int) -> OpenFile:
        if index < 0 or index >= len(self._files):
            raise IndexOutOfRangeError(
                "File index out of range",
                details={"index": index, "open_files": len(self._files)}
            )
        return self._files[index]

    @staticmethod
    def _remove_copy(target: Path) -> None:
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove incomplete copy {target}: {e}")

    def _current(self) -> OpenFile:
        if not self._files:
            raise IndexOutOfRangeError("Error getting open file: no file is open")
        return self._file_at(self._current_index)

    # Public API

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._current_index

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for command events.

        Returns:
            A function that unregisters the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def open_files(self, paths: Iterable[Path]) -> None:
        """
        Open files and append them to the list.

        Paths already open are skipped, comparing resolved paths. When
        the list was empty, the last opened file becomes current. Files opened before a failing path
        stay open; the failing file is not added.

        Raises:
            UnsupportedFileTypeError: If a file has an unsupported extension.
            ParseError: If a file's tag cannot be read.
        """
        with self._command("open_files"):
            was_empty = not self._files
            try:
                for path in paths:
                    path = Path(path)
                    if any(open_file.path.resolve() == path.resolve() for open_file in self._files):
                        logger.debug(f"Already open, skipping: {path}")
                        continue
                    metadata = open_metadata(path, self.config.tags)
                    self._files.append(OpenFile(path=path, metadata=metadata))
                    logger.info(f"Opened: {path.name}")
            finally:
                if was_empty and self._files:
                    self._current_index = len(self._files) - 1

    def close_file(self, index: int) -> None:
        """
        Close the file at index, discarding unsaved changes.

        The current index moves down by one when a file at or before it
        is closed, unless the closed file is the first one. It never
        points past the end of the list.

        Raises:
            IndexOutOfRangeError: If index is not an open file.
        """
        with self._command("close_file"):
            closed = self._file_at(index)
            del self._files[index]
            if self._current_index >= index and index >= 1:
                self._current_index -= 1
            self._current_index = min(self._current_index, max(len(self._files) - 1, 0))
            logger.info(f"Closed: {closed.path.name}")

    def show(self, index: int) -> None:
        """
        Make the file at index current.

        Raises:
            IndexOutOfRangeError: If index is not an open file.
        """
        with self._command("show"):
            self._file_at(index)
            self._current_index = index

    def get_app(self) -> dict[str, Any]:
        """
        Snapshot of the open-file list.

        Returns:
            {"current_index": int, "files": [{"path": str, "dirty": bool}, ...]}
        """
        with self._lock:
            return {
                "current_index": self._current_index,
                "files": [
                    {"path": str(open_file.path), "dirty": open_file.dirty}
                    for open_file in self._files
                ],
            }

    def get_page(self) -> dict[str, Any] | None:
        """
        Field view of the current file, or None if no file is open.

        Returns:
            FieldView.to_dict() of the current file plus its "path".
        """
        with self._lock:
            if not self._files:
                return None
            current = self._current()
            page = get_field_view(current.metadata).to_dict()
            page["path"] = str(current.path)
            return page

    def get_image(self, index: int | None = None) -> Picture | None:
        """
        Read a picture of the current file.

        Args:
            index: Picture index, or None for the default picture.

        Raises:
            IndexOutOfRangeError: If no file is open.
            UnsupportedPictureMetadataError: If the picture metadata is invalid.
        """
        with self._command("get_image"):
            return get_picture(self._current().metadata, index)

    def remove_image(self, index: int) -> None:
        """
        Remove a picture from the current file.

        Raises:
            IndexOutOfRangeError: If no file is open or index is invalid.
        """
        with self._command("remove_image"):
            current = self._current()
            remove_picture(current.metadata, index)
            current.dirty = True

    def set_image(self, index: int, image_path: Path) -> None:
        """
        Replace or append a picture of the current file from an image file.

        The image type is taken from the file extension.

        Raises:
            IndexOutOfRangeError: If no file is open or index is invalid.
            UnsupportedImageTypeError: If the extension is not allowed.
            InvalidImageError: If the image file cannot be read or decoded.
        """
        with self._command("set_image"):
            current = self._current()
            image_path = Path(image_path)
            try:
                data = image_path.read_bytes()
            except OSError as e:
                raise InvalidImageError(
                    f"Error reading image file {image_path}: {e}",
                    details={"image_path": str(image_path), "original_error": str(e)}
                ) from e
            set_picture(current.metadata, index, data, image_path.suffix)
            current.dirty = True

    def set_field(self, name: str, value: Any) -> None:
        """
        Set a canonical field of the current file (see Metadata.set_field).

        Raises:
            IndexOutOfRangeError: If no file is open.
            InvalidFieldValueError: If the field or value is invalid.
        """
        with self._command("set_field"):
            current = self._current()
            current.metadata.set_field(name, value)
            current.dirty = True

    def save_file(self, index: int, save_as: Path | None = None) -> None:
        """
        Write the tag of the file at index to disk.

        Args:
            index: Index of the file to save.
            save_as: Destination for save-as. The audio file is copied
                     there first, then the tag is written into the copy.
                     The item's path changes only if both steps succeed.

        Raises:
            IndexOutOfRangeError: If index is not an open file.
            SerializeError: If copying or writing fails. The file stays
                            dirty and a partial save-as copy is removed.
        """
        with self._command("save_file"):
            open_file = self._file_at(index)
            target = Path(save_as) if save_as is not None else open_file.path
            is_copy = target.resolve() != open_file.path.resolve()

            if is_copy:
                try:
                    shutil.copyfile(open_file.path, target)
                except OSError as e:
                    logger.error(f"Failed to copy {open_file.path} to {target}: {e}")
                    raise SerializeError(
                        f"Error copying file: {e}",
                        details={"source": str(open_file.path), "target": str(target)}
                    ) from e

            try:
                save_metadata(open_file.metadata, target)
            except SerializeError:
                if is_copy:
                    self._remove_copy(target)
                raise
            open_file.path = target
            open_file.dirty = False

    def has_unsaved_changes(self) -> bool:
        """True if any open file has unsaved changes."""
        with self._lock:
            return any(open_file.dirty for open_file in self._files)
