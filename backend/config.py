"""Application configuration."""

import os
import re
from pathlib import Path

DATA_DIR = Path(os.environ.get("DATA_DIR", str(Path(__file__).parent.parent / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)

FILES_DIR = DATA_DIR / "files"
FILES_DIR.mkdir(parents=True, exist_ok=True)


def parse_size(size_str: str) -> int:
    """Parse size string like '100MB', '1GB' into bytes."""
    if not size_str:
        return 0

    match = re.match(r"^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB|TB)$", size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")

    multipliers = {
        "B": 1,
        "KB": 1024,
        "MB": 1024**2,
        "GB": 1024**3,
        "TB": 1024**4,
    }
    return int(float(match.group(1)) * multipliers[match.group(2)])


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


# Identity
SECRET_KEY = os.environ.get("HANDOFF_SECRET_KEY", "change-me").strip()
TRUST_PROXY_HEADERS = _flag("HANDOFF_TRUST_PROXY")

# Uploads
MAX_FILE_SIZE = os.environ.get("HANDOFF_MAX_FILE_SIZE", "2MB")
MAX_FILE_SIZE_BYTES = parse_size(MAX_FILE_SIZE)

# Connection codes
CODE_MIN_LENGTH = int(os.environ.get("HANDOFF_CODE_MIN_LENGTH", "6"))
CODE_MAX_LENGTH = int(os.environ.get("HANDOFF_CODE_MAX_LENGTH", "10"))
CODE_USAGE_THRESHOLD = float(os.environ.get("HANDOFF_CODE_USAGE_THRESHOLD", "0.01"))
CODE_INSERT_ATTEMPTS = int(os.environ.get("HANDOFF_CODE_INSERT_ATTEMPTS", "10"))

# Transfer expiry (minutes)
DEFAULT_EXPIRY_MINUTES = int(os.environ.get("HANDOFF_DEFAULT_EXPIRY_MINUTES", "10"))
MAX_EXPIRY_MINUTES = int(os.environ.get("HANDOFF_MAX_EXPIRY_MINUTES", "1440"))

# Abuse guard
MAX_FAILED_ATTEMPTS = int(os.environ.get("HANDOFF_MAX_FAILED_ATTEMPTS", "5"))
INITIAL_BLOCK_SECONDS = int(os.environ.get("HANDOFF_INITIAL_BLOCK_SECONDS", "120"))
BLOCK_MULTIPLIER = int(os.environ.get("HANDOFF_BLOCK_MULTIPLIER", "2"))

LOG_LEVEL = os.environ.get("HANDOFF_LOG_LEVEL", "INFO").strip().upper()

if not 1 <= CODE_MIN_LENGTH <= CODE_MAX_LENGTH:
    raise ValueError("HANDOFF_CODE_MIN_LENGTH must be between 1 and HANDOFF_CODE_MAX_LENGTH")
if not 0 < CODE_USAGE_THRESHOLD < 1:
    raise ValueError("HANDOFF_CODE_USAGE_THRESHOLD must be in (0, 1)")
if CODE_INSERT_ATTEMPTS < 1:
    raise ValueError("HANDOFF_CODE_INSERT_ATTEMPTS must be positive")
if DEFAULT_EXPIRY_MINUTES < 1 or MAX_EXPIRY_MINUTES < DEFAULT_EXPIRY_MINUTES:
    raise ValueError("Expiry minutes must satisfy 1 <= default <= max")
if MAX_FAILED_ATTEMPTS < 1 or INITIAL_BLOCK_SECONDS < 1 or BLOCK_MULTIPLIER < 1:
    raise ValueError("Abuse guard settings must be positive")
