"""
Utility functions for ldtk2tscn.
"""

import json
import os
import random
import re
import string
from pathlib import Path
from typing import Any, Dict, Optional
from .logging_config import get_logger

logger = get_logger('utils')

UID_ALPHABET = string.ascii_lowercase + string.digits
UID_LENGTH = 13

SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB']


def load_json(filepath: str) -> Dict[str, Any]:
    """Load a JSON file."""
    with open(filepath, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_text(text: str, filepath: str) -> None:
    """Save text to a file, creating parent directories."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8', newline='\n') as f:
        f.write(text)
    logger.debug(f"Wrote {len(text)} characters to {filepath}")


def sanitize_filename(name: str) -> str:
    """Replace everything except letters, digits, '_' and '-' with '_'."""
    return re.sub(r'[^a-zA-Z0-9_-]', '_', name)


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot ('' when there is none)."""
    return Path(filename).suffix.lower()


def generate_uid(rng: Optional[random.Random] = None) -> str:
    """
    Generate an opaque resource uid suffix.

    Only uniqueness within one scene matters, not the exact value.

    Args:
        rng: Random source (a seeded instance makes output reproducible)

    Returns:
        Lower-case alphanumeric string
    """
    rng = rng if rng is not None else random.SystemRandom()
    return ''.join(rng.choice(UID_ALPHABET) for _ in range(UID_LENGTH))


def format_file_size(num_bytes: int) -> str:
    """
    Format a byte count for display (e.g. 1536 -> '1.5 KB').

    Args:
        num_bytes: Size in bytes

    Returns:
        Size with two decimals at most, trailing zeros dropped
    """
    if num_bytes <= 0:
        return '0 Bytes'
    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    value = f"{size:.2f}".rstrip('0').rstrip('.')
    return f"{value} {SIZE_UNITS[unit]}"
