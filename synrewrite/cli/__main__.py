from __future__ import annotations

import sys

from . import rewrite_cli


def main() -> int:
    return rewrite_cli.main()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
