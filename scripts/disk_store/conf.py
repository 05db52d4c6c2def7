"""disk_store - Central path configuration."""

import os
from pathlib import Path


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


USER_HOME = Path.home()
FLOW_HOME = USER_HOME / ".flow"

DISK_STORE_HOME = Path(os.environ.get("DISK_STORE_HOME") or FLOW_HOME / "disk_store")
RECORDS_PATH = Path(os.environ.get("DISK_STORE_RECORDS") or DISK_STORE_HOME / "records")

LOG_FILE = DISK_STORE_HOME / "disk_store.log"
LOG_ENABLED = _env_flag("DISK_STORE_LOG", True)
LOG_TO_STDERR = _env_flag("DISK_STORE_LOG_STDERR", False)


def get_records_dir(name: str) -> Path:
    """Return the record directory for a named store.

    Path: <RECORDS_PATH>/<name>
    Creates the directory if it doesn't exist.
    """
    records_dir = RECORDS_PATH / name
    records_dir.mkdir(parents=True, exist_ok=True)
    return records_dir
