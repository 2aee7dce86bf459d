#!/usr/bin/env python
"""
Command-line entry for the listing specifics service.
Use: python run_specifics.py reconcile request.json
Or:  python run_specifics.py analyze https://.../photo1.jpg https://.../photo2.jpg
Or:  python run_specifics.py validate draft.json
"""
import argparse
import json
import sys

from specifics.errors import AnalysisError, SchemaError
from specifics.log import configure_logging


def _reconcile(args: argparse.Namespace) -> int:
    from specifics.pipeline import reconcile_request

    with open(args.request, encoding="utf-8") as fh:
        payload = json.load(fh)

    try:
        output = reconcile_request(
            payload.get("definitions") or [],
            payload.get("facts") or {},
            payload.get("evidence") or [],
        )
    except SchemaError as e:
        print(f"Schema error: {e}", file=sys.stderr)
        return 2

    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    print()
    return 0


def _analyze(args: argparse.Namespace) -> int:
    from specifics.client import SessionStore
    from specifics.pipeline import run_listing_pipeline

    store = SessionStore() if args.store else None
    try:
        result = run_listing_pipeline(args.images, session_id=args.session_id, store=store)
    except AnalysisError as e:
        print(f"Analysis failed: {e}", file=sys.stderr)
        return 1

    json.dump(result.to_output(), sys.stdout, indent=2, ensure_ascii=False)
    print()
    return 0


def _validate(args: argparse.Namespace) -> int:
    from specifics.pipeline import validate_publish_payload

    with open(args.payload, encoding="utf-8") as fh:
        body = json.load(fh)

    payload, errors = validate_publish_payload(body)
    if errors:
        json.dump({"error": "Validation failed", "details": errors}, sys.stdout, indent=2)
        print()
        return 1

    json.dump(payload.model_dump(mode="json"), sys.stdout, indent=2, ensure_ascii=False)
    print()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="eBay item-specifics from product photos")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    p_reconcile = sub.add_parser("reconcile", help="Reconcile facts against aspect definitions")
    p_reconcile.add_argument("request", help="JSON file with definitions, facts and optional evidence")
    p_reconcile.set_defaults(func=_reconcile)

    p_analyze = sub.add_parser("analyze", help="Run the full photo-to-listing flow")
    p_analyze.add_argument("images", nargs="+", help="Hosted image URLs")
    p_analyze.add_argument("--session-id", default=None)
    p_analyze.add_argument("--store", action="store_true", help="Cache the draft in Redis")
    p_analyze.set_defaults(func=_analyze)

    p_validate = sub.add_parser("validate", help="Check a finished draft before publishing")
    p_validate.add_argument("payload", help="JSON file with the publish payload")
    p_validate.set_defaults(func=_validate)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
