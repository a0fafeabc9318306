"""Run the insight pipeline for one podcast moment from the command line.

Example:
    python scripts/process_episode.py "How to Build a Habit" --show "Huberman Lab" --at 1:02:05
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import get_settings
from src.insight.audit import SupabaseAuditLog
from src.insight.errors import InsightError
from src.insight.orchestrator import build_pipeline
from src.insight.reference import normalize_reference


def process_episode(
    title: str,
    show_name: str | None,
    timestamp: str | None,
    source_url: str | None,
    audit: bool,
) -> int:
    settings = get_settings()
    audit_log = SupabaseAuditLog() if audit and settings.supabase_url else None

    try:
        reference = normalize_reference(title, show_name, timestamp, source_url)
        pipeline = build_pipeline(settings, audit=audit_log.write if audit_log else None)
        result = pipeline.run(reference)
    except InsightError as e:
        print(json.dumps({"success": False, "kind": e.kind, "message": e.message, "detail": e.detail}, indent=2))
        return 1

    print(json.dumps({"success": True, "data": asdict(result)}, indent=2, default=str))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("title", help="Episode title")
    parser.add_argument("--show", default=None, help="Show name")
    parser.add_argument("--at", default=None, help="Timestamp in seconds or H:MM:SS")
    parser.add_argument("--url", default=None, help="Source (Spotify) URL for the audit log")
    parser.add_argument("--audit", action="store_true", help="Write an audit row to Supabase")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    sys.exit(process_episode(args.title, args.show, args.at, args.url, args.audit))
