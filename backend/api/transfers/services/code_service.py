"""Connection code generation.

Codes are drawn from upper-case letters and digits. The length grows with the
number of active transfers so that at most ``CODE_USAGE_THRESHOLD`` of the
code space is in use, up to ``CODE_MAX_LENGTH``. Past that point codes keep
the maximum length and collisions simply become more likely.
"""

import logging
import secrets
import string

import timeutil
from config import CODE_MAX_LENGTH, CODE_MIN_LENGTH, CODE_USAGE_THRESHOLD
from api.transfers.repositories import transfers_repository

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase + string.digits


def calculate_code_length(
    active_count: int,
    min_length: int = CODE_MIN_LENGTH,
    max_length: int = CODE_MAX_LENGTH,
    usage_threshold: float = CODE_USAGE_THRESHOLD,
) -> int:
    length = min_length
    space = len(ALPHABET) ** length
    while active_count / space > usage_threshold and length < max_length:
        length += 1
        space = len(ALPHABET) ** length
    return length


def generate_code(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_unique_code() -> str:
    """Return a code no stored transfer uses at the moment of the check.

    Another writer can still claim the same code before it is inserted; the
    create path handles that through the unique index.
    """
    active = transfers_repository.count_active(timeutil.utcnow())
    length = calculate_code_length(active)
    if length == CODE_MAX_LENGTH and active / len(ALPHABET) ** length > CODE_USAGE_THRESHOLD:
        logger.warning("Code space saturated: %d active transfers at length %d", active, length)

    while True:
        code = generate_code(length)
        if not transfers_repository.code_exists(code):
            return code
