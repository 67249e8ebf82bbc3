"""Command-line entry point: ``python -m stableplan serve [--host H] [--port P]``."""

from __future__ import annotations

import sys


def _serve_args(args: list[str]) -> tuple[str, int]:
    opts = dict(zip(args[::2], args[1::2]))
    unknown = set(opts) - {"--host", "--port"}
    if unknown or len(args) % 2:
        raise SystemExit(f"usage: python -m stableplan serve [--host HOST] [--port PORT] (got {args})")
    return opts.get("--host", "127.0.0.1"), int(opts.get("--port", 8000))


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] != "serve":
        raise SystemExit(f"Unknown command: {args[0]}")
    host, port = _serve_args(args[1:])

    from stableplan.web.server import main as serve
    serve(host=host, port=port)


if __name__ == "__main__":
    main()
