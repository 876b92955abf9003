"""Common utilities for the match notifier."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional
import discord


# Time Utilities
def parse_henrik_timestamp(value: Any) -> Optional[datetime]:
    """Parse a Henrik API timestamp which may be ISO8601 or UNIX epoch."""
    if value is None or value == "":
        return None

    try:
        # If numeric (or numeric string), treat as epoch seconds or ms
        if isinstance(value, (int, float)) or (isinstance(value, str) and value.isdigit()):
            ts = float(value)
            if ts > 1e12:  # likely milliseconds
                ts /= 1000.0
            return datetime.fromtimestamp(ts, tz=timezone.utc)

        if isinstance(value, str):
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError) as e:
        logging.debug(f"Failed to parse timestamp {value}: {e}")

    return None


# File Utilities
def safe_json_load(filepath: str, default: Any = None) -> Any:
    """Load JSON file with error handling."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logging.debug(f"File not found: {filepath}, returning default")
        return default
    except json.JSONDecodeError as e:
        logging.error(f"JSON decode error in {filepath}: {e}")
        return default
    except OSError as e:
        logging.error(f"Error loading {filepath}: {e}")
        return default


# Discord Utilities
def safe_embed_field(embed: discord.Embed, name: str, value: Any, inline: bool = True) -> None:
    """Add field to embed with length validation."""
    name = str(name)
    value = str(value)
    # Discord limits: name=256, value=1024
    if len(name) > 256:
        name = name[:253] + "..."
    if len(value) > 1024:
        value = value[:1021] + "..."

    embed.add_field(name=name, value=value, inline=inline)


# Error Handling Utilities
def log_error(action: str, error: Exception, level: int = logging.ERROR) -> None:
    """Standardized error logging."""
    logging.log(level, f"Error {action}: {type(error).__name__}: {str(error)}")
