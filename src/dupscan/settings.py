import os
import tomllib
from pathlib import Path

SETTINGS_ENVIRONMENT_VARIABLE = 'DUPSCAN_SETTINGS'
DEFAULT_SETTINGS_FILE_NAME = '.dupscan.toml'

# Settings key constants
SETTING_CONCURRENCY = 'scan.concurrency'
SETTING_HASH_ALGORITHM = 'scan.hash_algorithm'
SETTING_FAIL_FAST = 'scan.fail_fast'
SETTING_REPORT_DIRECTORY = 'report.directory'
SETTING_LOGGING_PATH = 'logging.path'
SETTING_LOGGING_LEVEL = 'logging.level'


class ScanSettings:
    """Read-only view over a TOML settings file.

    The class does not interpret the settings; callers apply defaults and validation. A missing
    file (or no file at all) behaves as an empty settings table.

    Example:
        settings = ScanSettings.locate(root)
        algorithm = settings.get(SETTING_HASH_ALGORITHM, 'sha256')
    """

    def __init__(self, settings_file: Path | None = None):
        self._settings_file = settings_file
        self._settings = {}

        if settings_file is not None and settings_file.exists():
            with open(settings_file, 'rb') as f:
                self._settings = tomllib.load(f)

    @classmethod
    def locate(cls, root: Path, explicit: str | os.PathLike | None = None) -> 'ScanSettings':
        """Find the settings file for a scan of root.

        An explicit path wins, then the DUPSCAN_SETTINGS environment variable, then
        ROOT/.dupscan.toml. An explicit path that does not exist is an error.

        Raises:
            FileNotFoundError: The explicitly requested settings file does not exist
        """
        if explicit is None:
            explicit = os.environ.get(SETTINGS_ENVIRONMENT_VARIABLE)

        if explicit is not None:
            settings_file = Path(explicit)
            if not settings_file.is_file():
                raise FileNotFoundError(f"Settings file {settings_file} does not exist")
            return cls(settings_file)

        return cls(Path(root) / DEFAULT_SETTINGS_FILE_NAME)

    @property
    def path(self) -> Path | None:
        return self._settings_file

    def get(self, key: str, default=None):
        """Get a setting by dotted key path, e.g. 'scan.concurrency'.

        Returns default if any segment of the path is missing or an intermediate value is not
        a table.
        """
        value = self._settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
