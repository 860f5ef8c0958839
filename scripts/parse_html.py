#!/usr/bin/env python3
"""Parse a saved FanDuel settled-bets page into a JSON array of bets."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from ledgerlab import parse_fanduel
from ledgerlab.config import get_settings
from ledgerlab.ledger.types import bets_to_wire


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("input", type=Path, help="HTML file saved from the settled-bets page")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Where to write the JSON (default: stdout)")
    parser.add_argument("--log-level", default=None, help="Overrides LEDGERLAB_LOG_LEVEL")
    args = parser.parse_args()

    logging.basicConfig(level=(args.log_level or get_settings().log_level).upper())
    bets = parse_fanduel(args.input.read_text(encoding="utf-8"))
    payload = json.dumps(bets_to_wire(bets), indent=2)

    if args.output is None:
        print(payload)
        return
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(payload + "\n", encoding="utf-8")
    print(f"Wrote {len(bets)} bets to {args.output}")


if __name__ == "__main__":
    main()
