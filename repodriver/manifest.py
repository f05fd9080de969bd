"""
Manifest parsing helpers.

A manifest is the JSON dependency declaration stored at a reference of a
repository (``composer.json`` by default).
"""

import json
import re
from typing import Any, Dict, Optional, Union

from .exit_codes import MalformedManifestError

COMMIT_SHA_PATTERN = re.compile(r'^[a-f0-9]{40}$', re.IGNORECASE)


def is_commit_sha(identifier: str) -> bool:
    """True if identifier has the shape of a full commit sha."""
    return bool(identifier) and COMMIT_SHA_PATTERN.match(identifier) is not None


def parse_json(raw: Union[str, bytes], source: Optional[str] = None) -> Any:
    """
    Decode a JSON document fetched from source.

    Raises:
        MalformedManifestError: if the content is not valid JSON
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedManifestError(f"{source or 'manifest'} is not valid UTF-8: {e}", url=source) from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedManifestError(
            f"\"{source or 'manifest'}\" does not contain valid JSON: "
            f"{e.msg} at line {e.lineno}, column {e.colno}",
            url=source
        ) from e


def parse_manifest(raw: Union[str, bytes], source: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Parse manifest content.

    Args:
        raw: JSON text
        source: Where the content came from, used in error messages

    Returns:
        Parsed mapping, or None for a JSON ``null`` document

    Raises:
        MalformedManifestError: if the content is not a JSON object
    """
    data = parse_json(raw, source)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise MalformedManifestError(
            f"\"{source or 'manifest'}\" must contain a JSON object, got {type(data).__name__}",
            url=source
        )
    return data


def encode_manifest(record: Optional[Dict[str, Any]]) -> bytes:
    """Serialize a manifest record for the cache."""
    return json.dumps(record, ensure_ascii=False, sort_keys=True).encode('utf-8')


def ensure_support(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return the record's ``support`` mapping, creating it when missing."""
    support = record.get('support')
    if not isinstance(support, dict):
        support = {}
        record['support'] = support
    return support
