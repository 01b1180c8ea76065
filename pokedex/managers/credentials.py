"""
Credential Store - Holds the session credential, with a durable copy on disk.

The in-memory credential is authoritative. The file only lets a session
survive restarts; failing to read or write it is logged and ignored.
"""
import os
import json
import logging
from pathlib import Path
from typing import Optional

from ..models import Credential

logger = logging.getLogger(__name__)


class CredentialStore:
    """At most one credential at a time; None means logged out."""

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: JSON file for the durable copy, or None to keep it in memory only
        """
        self.path = path
        self._credential: Optional[Credential] = None

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def token(self) -> Optional[str]:
        return self._credential.token if self._credential else None

    # ============================================
    # DURABLE COPY
    # ============================================

    def load(self) -> Optional[Credential]:
        """Restore the credential saved by a previous run, if any."""
        if self.path is None:
            return self._credential

        self._recover_temp_file()
        try:
            if not self.path.exists():
                return self._credential
            data = json.loads(self.path.read_text())
            self._credential = Credential.from_api(data)
            logger.info(f'Restored session for {self._credential.user.name}')
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f'Ignoring unreadable session file {self.path}: {e}')
        except (IOError, OSError) as e:
            logger.warning(f'Cannot read session file: {e}')
        return self._credential

    def _recover_temp_file(self):
        """Promote a leftover temp file from an interrupted save."""
        temp_path = self._temp_path()
        try:
            if temp_path.exists():
                os.replace(temp_path, self.path)
                logger.info('Recovered session file from interrupted save')
        except OSError as e:
            logger.warning(f'Cannot recover session temp file: {e}')

    def _temp_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + '.tmp')

    def _write(self, credential: Credential):
        """Atomic write: temp file then rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._temp_path()
        temp_path.write_text(json.dumps(credential.to_dict(), indent=2))
        os.replace(temp_path, self.path)

    # ============================================
    # MUTATION (session guard only)
    # ============================================

    def set(self, credential: Credential):
        """Replace the credential in memory, then persist it."""
        self._credential = credential
        if self.path is None:
            return
        try:
            self._write(credential)
        except (IOError, OSError) as e:
            logger.warning(f'Session not persisted: {e}')

    def clear(self) -> bool:
        """Drop the credential and its durable copy. Returns True if one was held."""
        had_credential = self._credential is not None
        self._credential = None
        if self.path is None:
            return had_credential
        for path in (self.path, self._temp_path()):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f'Cannot remove {path.name}: {e}')
        return had_credential
