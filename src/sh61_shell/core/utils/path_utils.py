# src/sh61_shell/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving package and user paths.
    """

    # --- Package paths

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the installed sh61_shell package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_default_settings_file() -> Path:
        return PathUtils.get_shell_package_root() / "settings.json"

    # --- User specific paths ---

    @staticmethod
    def get_user_config_dir() -> Path:
        """
        Returns the path to the user's .sh61 config directory.
        (e.g., ~/.sh61/)
        """
        return Path.home() / ".sh61"

    @staticmethod
    def get_user_settings_file() -> Path:
        """Returns the optional per-user settings override file."""
        return PathUtils.get_user_config_dir() / "settings.json"
