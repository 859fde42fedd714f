"""Estimate house size, windows and energy usage for one address.

Run::

    python -m scripts.estimate_address "123 Main St, Toronto, Ontario"
    python -m scripts.estimate_address --json --seed 7 "M5V 2T6"

Policies and provider credentials come from the same ``HOMEEST_`` environment
variables as the API.
"""

import argparse
import asyncio
import json
import logging
import random
import sys

from app.errors import EstimateError
from app.services import presenter
from app.services.pipeline import build_pipeline

logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("address", help="Free-text address or postal code")
    parser.add_argument("--seed", type=int, help="Seed the random source for a repeatable estimate")
    parser.add_argument("--json", action="store_true", help="Print the view model as JSON")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    rng = random.Random(args.seed) if args.seed is not None else None
    pipeline = build_pipeline(rng=rng)

    try:
        result = await pipeline.run(args.address)
    except EstimateError as exc:
        view = presenter.build_error_view(exc.message)
        exit_code = 1
    else:
        view = presenter.build_view(result)
        exit_code = 0

    if args.json:
        print(json.dumps(view.model_dump(mode="json", exclude_none=True), indent=2))
    else:
        print(presenter.render_text(view))
    return exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
