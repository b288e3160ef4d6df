"""
Run a test case file locally and print the report as JSON.

Why:
- Reproduce what ``POST /execute-test`` does without starting the server.
- Watch a failing test case in a headed browser (``--headed``).

Usage:
  python3 scripts/run_test_case.py ./login.yaml
  python3 scripts/run_test_case.py ./login.json --browser firefox --headed
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging

from pwrunner.core.browser import resolve_browser_type
from pwrunner.core.config import settings
from pwrunner.runner.executor import run_test_case
from pwrunner.runner.test_case import load_test_case


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("path", help="YAML/JSON test case file")
    ap.add_argument("--browser", default=None, help="chromium | firefox | webkit")
    ap.add_argument("--headed", action="store_true", help="Show the browser window")
    ap.add_argument("--screenshot-chars", type=int, default=None, help="Cut screenshot payloads to N characters")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    config = settings.runner_config()
    if args.headed:
        config = dataclasses.replace(config, headless=False)
    if args.screenshot_chars is not None:
        config = dataclasses.replace(config, screenshot_max_chars=args.screenshot_chars)

    test_case = load_test_case(args.path)
    report = run_test_case(
        test_case,
        browser_type=resolve_browser_type(args.browser, config.default_browser),
        config=config,
    )
    print(json.dumps(report.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2))
    return 0 if report.status.value == "passed" else 1


if __name__ == "__main__":
    raise SystemExit(main())
