"""
Data manager for the persisted high score.

The store is a small durable key-value mapping of strings. The file-backed
implementation keeps a single JSON object on disk.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional


HIGH_SCORE_KEY = "math-quiz-high-score"


class InMemoryStore:
    """Key-value store that lives only as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)


class DataManager:
    """Manages the JSON file that holds persisted values."""

    def __init__(self, storage_file: str = "./data/high_score.json"):
        """
        Initialize DataManager with the storage file path.

        The file is read once here; later reads are served from memory.

        Args:
            storage_file: Path to the JSON file holding persisted values
        """
        self.storage_file = Path(storage_file)
        self.logger = logging.getLogger(__name__)
        self.load_errors: List[str] = []  # Track loading errors for user feedback
        self._values: Dict[str, str] = self._load_values()

    def _load_values(self) -> Dict[str, str]:
        """
        Load the storage file with error handling.

        Returns:
            Mapping of stored keys to string values, empty if unavailable
        """
        if not self.storage_file.exists():
            self.logger.info(f"No storage file at {self.storage_file}, starting empty")
            return {}

        try:
            with open(self.storage_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in {self.storage_file}: {e}"
            self.logger.error(error_msg)
            self.load_errors.append(error_msg)
            return {}
        except OSError as e:
            error_msg = f"Failed to read storage file {self.storage_file}: {e}"
            self.logger.error(error_msg)
            self.load_errors.append(error_msg)
            return {}

        if not self.validate_store_structure(data):
            self.load_errors.append(f"Invalid store structure in {self.storage_file}")
            return {}

        return {key: str(value) for key, value in data.items()}

    def validate_store_structure(self, data) -> bool:
        """
        Validate that JSON data has the store structure.

        Expected structure:
        {
            "<key>": "<value>" or <int>
        }

        Args:
            data: Parsed JSON data to validate

        Returns:
            True if structure is valid, False otherwise
        """
        if not isinstance(data, dict):
            self.logger.error("Store data must be a JSON object")
            return False

        for key, value in data.items():
            if not isinstance(value, (str, int)) or isinstance(value, bool):
                self.logger.error(f"Value for '{key}' must be a string or integer")
                return False

        return True

    def get(self, key: str) -> Optional[str]:
        """
        Retrieve a stored value.

        Args:
            key: Key to look up

        Returns:
            The stored string, or None if the key is missing
        """
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Store a value and write the file synchronously.

        Args:
            key: Key to store under
            value: String value to store

        Raises:
            OSError: If the file cannot be written
        """
        self._values[key] = str(value)
        try:
            self.storage_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.storage_file, 'w', encoding='utf-8') as f:
                json.dump(self._values, f, indent=2)
        except OSError as e:
            self.logger.error(f"Failed to write storage file {self.storage_file}: {e}")
            raise
        self.logger.debug(f"Stored '{key}' in {self.storage_file}")

    def get_load_errors(self) -> List[str]:
        """
        Get list of errors encountered while loading the storage file.

        Returns:
            List of error messages
        """
        return self.load_errors.copy()

    def has_load_errors(self) -> bool:
        """
        Check if there were errors loading the storage file.

        Returns:
            True if there were loading errors, False otherwise
        """
        return len(self.load_errors) > 0


def load_high_score(store) -> int:
    """
    Read the high score from a key-value store.

    Returns:
        The stored score, or 0 if it is missing or unparsable
    """
    raw = store.get(HIGH_SCORE_KEY)
    if raw is None:
        return 0
    try:
        return max(0, int(raw))
    except (TypeError, ValueError):
        logging.getLogger(__name__).warning(f"Ignoring unparsable high score value: {raw!r}")
        return 0


def save_high_score(store, value: int) -> None:
    """Persist the high score as a base-10 integer string."""
    store.set(HIGH_SCORE_KEY, str(int(value)))
