"""
Output format utilities for gitdag CLI commands.

Provides byte-size display and JSON, JSONL and YAML formatting of report
data.
"""

import json
import os
from typing import Dict, Any, Iterable, Iterator

import yaml

KB = 1024
MB = 1024 * KB

FORMATS = ('table', 'json', 'jsonl', 'yaml')


def display_size(size: int) -> str:
    """
    Human-readable byte size.

    Example:
        display_size(512)       -> "512 bytes"
        display_size(2048)      -> "2.00 KB"
        display_size(5 * MB)    -> "5.00 MB"
    """
    if size >= MB:
        return f"{size / MB:.2f} MB"
    if size >= KB:
        return f"{size / KB:.2f} KB"
    return f"{size} bytes"


def format_output(data: Iterable[Dict[str, Any]], format: str) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Dictionaries to format
        format: Output format (json, jsonl, yaml)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "yaml":
        yield from format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """One compact JSON document per item."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """All items as one indented JSON array."""
    yield json.dumps(list(data), ensure_ascii=False, indent=2)


def format_yaml(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """All items as one YAML list."""
    yield yaml.dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)


def get_format_from_env(default: str = 'table') -> str:
    """
    Get output format from environment variable.

    Checks GITDAG_FORMAT environment variable.

    Args:
        default: Default format if not specified

    Returns:
        Format string
    """
    format = os.environ.get('GITDAG_FORMAT', default).lower()
    if format not in FORMATS:
        return default
    return format
