#!/usr/bin/env python3
"""
MedAI -- backend for doctor accounts and diagnostic analysis history.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 5000 --reload
  python main.py seed-analysis analyses.json
  python main.py counts

Environment variables:
  JWT_SECRET     When set, sessions are signed JWTs in an httpOnly cookie.
                 When empty, sessions are a plain user_email cookie.
  DATABASE_URL   SQLAlchemy URL for both stores. Defaults to local SQLite files.
  PORT           Port for `serve` when --port is not given (default 5000).
"""

import argparse
import json
import os
from pathlib import Path

from analysis.models import Analysis
from analysis.store import AnalysisStore
from core.config import get_settings


def _analysis_store() -> AnalysisStore:
    settings = get_settings()
    return AnalysisStore(settings.database_url) if settings.database_url else AnalysisStore()


def _load_analyses(path: str) -> list[Analysis]:
    """Read analysis records from a JSON file holding a list of objects.

    Accepts the camelCase keys the API returns (patientName, analysisType,
    createdAt, userEmail) as well as snake_case. Entries without a patient
    name are skipped.
    """
    file_path = Path(path).resolve()
    if not file_path.is_file():
        print(f"  [!] '{path}' is not a readable file.")
        return []
    try:
        raw = json.loads(file_path.read_text())
    except (OSError, ValueError) as e:
        print(f"  [!] Could not read file '{path}': {e}")
        return []
    if not isinstance(raw, list):
        print(f"  [!] '{path}' must contain a JSON list of analysis objects.")
        return []

    records: list[Analysis] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            print(f"  [!] Entry {i} is not an object, skipped.")
            continue
        patient = item.get("patientName") or item.get("patient_name")
        if not patient:
            print(f"  [!] Entry {i} has no patient name, skipped.")
            continue
        records.append(
            Analysis(
                patient_name=patient,
                analysis_type=item.get("analysisType") or item.get("analysis_type") or "unknown",
                results=item.get("results") or {},
                user_email=item.get("userEmail") or item.get("user_email"),
                created_at=item.get("createdAt") or item.get("created_at") or "",
            )
        )
    return records


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    port = args.port or int(os.environ.get("PORT", "5000"))
    uvicorn.run("asgi:app", host=args.host, port=port, reload=args.reload)


def cmd_seed(args: argparse.Namespace) -> None:
    records = _load_analyses(args.file)
    if not records:
        return
    store = _analysis_store()
    inserted = 0
    try:
        for record in records:
            try:
                store.create_analysis(record)
                inserted += 1
            except ValueError as e:
                print(f"  [!] Skipped analysis for {record.patient_name}: {e}")
    finally:
        store.close()
    print(f"  Inserted {inserted} of {len(records)} analyses.")


def cmd_counts(args: argparse.Namespace) -> None:
    store = _analysis_store()
    try:
        counts = store.category_counts()
    finally:
        store.close()
    if args.json:
        print(json.dumps(counts, indent=2))
        return
    print("\nMedAI -- analysis counts")
    print("-" * 40)
    print(f"  Last 24 hours : {counts['todayCount']}")
    print(f"  Total         : {counts['totalCount']}")
    print(f"  Oncology      : {counts['cancerCount']}")
    print(f"  Neurology     : {counts['neuroCount']}\n")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="medai",
        description="MedAI backend: run the API or manage stored analyses.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --reload
  JWT_SECRET=... python main.py serve --host 0.0.0.0
  python main.py seed-analysis analyses.json
  python main.py counts --json
        """,
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 5000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(func=cmd_serve)

    seed = sub.add_parser("seed-analysis", help="Load analyses from a JSON file")
    seed.add_argument("file", metavar="PATH", help="JSON file containing a list of analysis objects")
    seed.set_defaults(func=cmd_seed)

    counts = sub.add_parser("counts", help="Print dashboard category counts")
    counts.add_argument("--json", action="store_true", help="Output structured JSON")
    counts.set_defaults(func=cmd_counts)

    args = parser.parse_args()
    if not getattr(args, "func", None):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
