"""Browser options and the persisted JSON preferences file.

Preferences provide defaults for every display flag plus the programs used
for edit/open hand-offs. All access is defensive: a missing, unreadable or
malformed file falls back to built-in defaults.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "peek"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

_BOOL_KEYS = (
    "show_dotfiles",
    "use_color",
    "clear_on_exit",
    "show_path_header",
    "append_indicators",
    "hex_escape_unprintable",
)
_STR_KEYS = ("editor", "opener", "log_file")


@dataclass(frozen=True)
class BrowserOptions:
    """Display and hand-off settings for one session."""

    show_dotfiles: bool = False
    use_color: bool = True
    clear_on_exit: bool = False
    show_path_header: bool = False
    append_indicators: bool = False
    hex_escape_unprintable: bool = False
    editor: str | None = None
    opener: str | None = None
    log_file: str | None = None

    def replace(self, **changes: object) -> BrowserOptions:
        return dataclasses.replace(self, **changes)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_options() -> BrowserOptions:
    """Build ``BrowserOptions`` from the preferences file.

    Only booleans are accepted for flags and only non-empty strings for
    program names; anything else keeps its default.
    """
    data = load_config()
    values: dict[str, object] = {}
    for key in _BOOL_KEYS:
        value = data.get(key)
        if isinstance(value, bool):
            values[key] = value
    for key in _STR_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            values[key] = value.strip()
    return BrowserOptions(**values)
