"""Run the pipeline for one stored media asset, or dump the history ledger."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.models import ProcessResponse
from src.config import settings
from src.errors import IngestionError, TranscriptionError
from src.ingestion.models import MediaAsset
from src.services import get_analytics_reader, get_orchestrator


async def process(media_ref: str, retain: bool) -> int:
    """Process *media_ref* and print the combined result as JSON."""
    orchestrator = get_orchestrator()
    try:
        result = await orchestrator.process(MediaAsset(ref=media_ref, retain=retain))
    except (IngestionError, TranscriptionError) as exc:
        print(json.dumps({"error": str(exc)}, indent=2))
        return 1

    response = ProcessResponse.from_result(result)
    print(json.dumps(response.model_dump(mode="json", by_alias=True), indent=2))
    return 0


async def show_history() -> int:
    """Print every ledger entry as a JSON array."""
    entries = await get_analytics_reader().get_history()
    payload = [e.model_dump(mode="json", exclude_none=True) for e in entries]
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    print(f"{len(entries)} entries", file=sys.stderr)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Retail audio pipeline CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    process_parser = subparsers.add_parser("process", help="Transcribe + classify a media asset")
    process_parser.add_argument("media_ref", help="Object path in the media bucket or a URL")
    process_parser.add_argument(
        "--retain",
        action="store_true",
        help="Keep the asset after processing (default: delete it)",
    )

    subparsers.add_parser("history", help="Print the classification history ledger")

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper())

    if args.command == "process":
        exit_code = asyncio.run(process(args.media_ref, args.retain))
    else:
        exit_code = asyncio.run(show_history())
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
