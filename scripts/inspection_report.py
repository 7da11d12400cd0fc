#!/usr/bin/env python3
"""Print progress and completion for an exported inspection aggregate."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from src.models.inspection import PropertyInspectionData
from src.services.inspection_engine import InspectionEngine
from src.utils.logging import setup_logging


def format_summary(engine: InspectionEngine) -> str:
    total = engine.total_progress()
    report = engine.completion_report()
    lines = [
        f"Property: {engine.property_id}",
        f"Progress: {total.done}/{total.total} ({total.percent}%)",
    ]
    for category, progress in zip(engine.master.categories, total.categories):
        if progress.skipped:
            lines.append(f"  {category.short_name}: skipped")
        else:
            lines.append(f"  {category.short_name}: {progress.done}/{progress.total}")

    lines.append(f"Complete: {'yes' if report.is_complete else 'no'}")
    for missing in report.missing_items:
        lines.append(f"  missing item {missing.item_num}. {missing.item_name} ({missing.category_name})")
    for label in report.missing_maintenance_labels:
        lines.append(f"  missing maintenance: {label}")
    for reason in report.missing_reasons:
        lines.append(f"  missing not-conducted reason: {reason.scope} {reason.target_id}")
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser(description="Summarize an exported inspection aggregate.")
    parser.add_argument("input", help="Path to the aggregate JSON document.")
    parser.add_argument("--json", action="store_true", help="Emit progress and completion as JSON.")
    parser.add_argument("--log-level", default="WARNING", help="Log level for engine logs (written to stderr).")

    args = parser.parse_args()
    setup_logging(level=args.log_level, stream=sys.stderr)

    try:
        with open(Path(args.input), "r", encoding="utf-8") as f:
            data = PropertyInspectionData.from_document(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        print(f"Failed to read aggregate: {exc}", file=sys.stderr)
        return 1

    engine = InspectionEngine(data)

    if args.json:
        payload = {
            "progress": engine.total_progress().model_dump(mode="json", by_alias=True),
            "completion": engine.completion_report().model_dump(mode="json", by_alias=True),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(format_summary(engine))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
