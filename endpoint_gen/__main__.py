"""Entry point: python -m endpoint_gen

Reads spec/*.endpoint, generates generated/<name>.py for each source.
"""

from __future__ import annotations

import sys

from .codegen import generate_all


def main() -> int:
    results = generate_all()
    failed = [r for r in results if not r.ok]
    for result in failed:
        for diagnostic in result.diagnostics:
            print(f"error: {diagnostic}", file=sys.stderr)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
