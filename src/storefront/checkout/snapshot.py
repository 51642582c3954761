"""JSON snapshots carried in payment-session metadata.

The payment provider caps each metadata value at 500 characters, so a
snapshot is split across ``<key>``, ``<key>_1``, ``<key>_2`` ... and glued
back together when the webhook arrives.
"""

import json

MAX_METADATA_VALUE = 500
MAX_METADATA_KEYS = 50


def write_snapshot(metadata: dict[str, str], key: str, value) -> None:
    encoded = json.dumps(value, separators=(",", ":"))
    chunks = [encoded[i : i + MAX_METADATA_VALUE] for i in range(0, len(encoded), MAX_METADATA_VALUE)] or [""]
    if len(metadata) + len(chunks) > MAX_METADATA_KEYS:
        raise ValueError(f"Snapshot {key!r} does not fit into session metadata")

    for index, chunk in enumerate(chunks):
        metadata[key if index == 0 else f"{key}_{index}"] = chunk


def read_snapshot(metadata: dict, key: str):
    """Reassemble and decode a snapshot. Returns None when it is absent."""
    if not metadata or key not in metadata:
        return None

    parts = [metadata[key]]
    index = 1
    while f"{key}_{index}" in metadata:
        parts.append(metadata[f"{key}_{index}"])
        index += 1
    return json.loads("".join(parts))
