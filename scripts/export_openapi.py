#!/usr/bin/env python3
"""Write the parser API's OpenAPI document to disk."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any

from fastapi.encoders import jsonable_encoder

from ledgerlab.api.server import app

DEFAULT_OUTPUT = Path("api_spec/openapi.json")


def build_schema(server_url: str | None = None) -> dict[str, Any]:
    schema = jsonable_encoder(app.openapi())
    if server_url:
        schema["servers"] = [{"url": server_url.rstrip("/")}]
    return schema


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("-o", "--output", type=Path, default=DEFAULT_OUTPUT)
    parser.add_argument(
        "--server-url",
        default=os.getenv("PUBLIC_API_BASE_URL"),
        help="Public base URL advertised in the document's servers list",
    )
    args = parser.parse_args(argv)

    schema = build_schema(args.server_url)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(schema, indent=2) + "\n", encoding="utf-8")
    print(f"OpenAPI schema with {len(schema.get('paths', {}))} paths written to {args.output}")


if __name__ == "__main__":  # pragma: no cover
    main()
