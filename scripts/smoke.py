# scripts/smoke.py
"""
Smoke Test Script for iodine.

Simulates a three-layer request (api -> service -> storage) that fails at the
bottom, annotating the error at each layer, then prints both renderings.

Usage
-----
1. Human-readable report:
    $ uv run python scripts/smoke.py

2. JSON document, optionally saved for `iodine show`:
    $ uv run python scripts/smoke.py --json --out artifacts/errors/smoke.json
"""

import argparse
import logging
import sys
from pathlib import Path

import iodine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
log = logging.getLogger("iodine.smoke")


def storage_write(bucket: str, key: str) -> None:
    try:
        raise OSError(28, "No space left on device")
    except OSError as exc:
        raise iodine.new(exc, {"bucket": bucket, "object": key}) from exc


def service_put(bucket: str, key: str) -> None:
    try:
        storage_write(bucket, key)
    except iodine.AnnotatedError as err:
        raise err.annotate({"layer": "service"})


def api_handler(request_id: str) -> iodine.AnnotatedError:
    iodine.set_global_state("request", request_id)
    try:
        service_put("photos", "2024/cat.jpg")
    except iodine.AnnotatedError as err:
        return iodine.wrap(err, {"layer": "api"})
    finally:
        iodine.clear_global_state()
    raise RuntimeError("storage_write was expected to fail")


def main() -> None:
    """Execute the smoke workflow."""
    parser = argparse.ArgumentParser(description="Run iodine Smoke Test")
    parser.add_argument("--json", action="store_true", help="Emit the JSON document")
    parser.add_argument("--out", type=str, help="Also write the JSON document to this path")
    args = parser.parse_args()

    err = api_handler("r-42")
    log.info("Captured %d stack entries", len(err.stack))

    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(err.emit_json(indent=2))
        print(f"💾 Report saved to: {out}")

    if args.json:
        print(err.emit_json(indent=2).decode("utf-8"))
    else:
        print(err.emit_human_readable(), end="")


if __name__ == "__main__":
    main()
