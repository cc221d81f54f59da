"""
Generation event logging utilities for CHAPCHAP (Tier 2 logging).

Appends document generation events to a JSON Lines log so that other parts
of the product (download gating, admin analytics) can follow what happened to
a document without parsing the detailed per-run logs.

For detailed within-context logging (Tier 1), use chapchap.utils.logger instead.

Usage:
    from chapchap.utils.event_logging import log_generation_event

    log_generation_event(
        event_type="generation_completed",
        document_name="Amina_Mushi_CV",
        source="rendering",
        page_count=2,
    )
"""

import json
import os
import threading
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from chapchap.utils.timestamp import now_exact

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
GENERATION_EVENTS_FILE = Path(
    os.getenv("GENERATION_EVENTS_FILE", str(LOGS_PATH / "document_generation_events.log"))
)

# Batch generation appends from worker threads
_write_lock = threading.Lock()


def log_generation_event(
    event_type: str,
    document_name: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Log an event to the generation event log.

    Events are appended in JSON Lines format (one JSON object per line), which
    allows streaming processing and easy filtering by event_type,
    document_name, or source.

    Args:
        event_type: Type of event (e.g., "generation_started", "generation_failed")
        document_name: Document identifier (usually the output file stem)
        source: Event source (e.g., "rendering", "cli")
        events_file: Override the log file (default: GENERATION_EVENTS_FILE)
        **extra_fields: Additional event-specific fields
    """
    events_file = Path(events_file) if events_file is not None else GENERATION_EVENTS_FILE
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "document_name": document_name,
        "source": source,
        **extra_fields,
    }

    with _write_lock, open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    n: int = 10,
    document_name: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> List[dict]:
    """
    Get the last n events from the generation log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        document_name: Filter to only events for this document (optional)
        event_type: Filter to only events of this type (optional)
        events_file: Override the log file (default: GENERATION_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = Path(events_file) if events_file is not None else GENERATION_EVENTS_FILE
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if document_name:
        events = [e for e in events if e.get("document_name") == document_name]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
