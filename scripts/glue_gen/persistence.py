"""
Generated file persistence

Writes generated units to temporary files and moves them into place at the
end of a batch, so a failed batch never leaves half-updated output behind.
"""

import os

from .logging import get_logger

logger = get_logger('persistence')

TEMP_SUFFIX = '.tmp'


class GeneratedFileManager:
    """Saves generated text only when it differs from what is on disk"""

    def __init__(self):
        self._pending: dict[str, str] = {}  # final path -> temp path

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    def ensure_directory(self, directory: str) -> bool:
        """Create a directory tree, logging failures"""
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            logger.error('Could not create directory %s: %s', directory, exc)
            return False
        return True

    def save_file_if_changed(self, path: str, text: str) -> bool:
        """Stage text for path unless path already holds it

        Returns True if a write was staged.
        """
        if self._read(path) == text:
            return False

        temp_path = path + TEMP_SUFFIX
        with open(temp_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(text)
        self._pending[path] = temp_path
        logger.debug('    staged %s', path)
        return True

    def rename_temp_files(self) -> int:
        """Move every staged file into place, returning how many were committed"""
        committed = 0
        for path, temp_path in self._pending.items():
            os.replace(temp_path, path)
            committed += 1
        self._pending.clear()
        return committed

    def discard_temp_files(self):
        """Drop staged files without touching the final paths"""
        for temp_path in self._pending.values():
            try:
                os.remove(temp_path)
            except FileNotFoundError:
                pass
        self._pending.clear()

    @staticmethod
    def _read(path: str):
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except FileNotFoundError:
            return None
