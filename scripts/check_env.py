"""Pre-flight check for the PointBridge database adapter configuration.

Resolves which backend an env file binds the API to (``local``, or
``remote`` against Supabase) and refuses configurations the adapter would
reject at boot. ``record`` and ``verify`` additionally pin the env file to a
SHA-256 baseline so a deploy notices when credentials or the backend switch
were edited underneath it::

    python -m scripts.check_env check --env-file .env
    python -m scripts.check_env record --env-file .env --hash-file .env.sha256
    python -m scripts.check_env verify --env-file .env --hash-file .env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path

from pydantic import ValidationError

from pointbridge.core.config import AppSettings, _load_env_file
from pointbridge.services.database import BackendMode, resolve_backend_mode

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


class BackendConfigurationError(Exception):
    """Raised when the selected backend cannot be bound with the given settings."""


def resolve_backend(env_file: Path) -> BackendMode:
    """Return the backend ``env_file`` selects, failing like the adapter would."""
    if not env_file.is_file():
        raise FileNotFoundError(f"No env file at {env_file}.")
    _load_env_file(str(env_file))
    settings = AppSettings(_env_file=env_file)
    mode = resolve_backend_mode(settings)
    if mode is BackendMode.REMOTE and not settings.supabase.is_configured:
        raise BackendConfigurationError(
            "DATABASE_BACKEND=remote requires SUPABASE_URL and SUPABASE_ANON_KEY."
        )
    return mode


def env_digest(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def pin_baseline(env_file: Path, hash_file: Path) -> int:
    digest = env_digest(env_file)
    hash_file.write_text(f"{digest}\n", encoding="utf-8")
    print(f"Pinned {env_file} at {digest} in {hash_file}")
    return EXIT_OK


def compare_baseline(env_file: Path, hash_file: Path) -> int:
    if not hash_file.is_file():
        print(
            f"No baseline at {hash_file}; pin one first with the 'record' command.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    pinned = hash_file.read_text(encoding="utf-8").strip()
    current = env_digest(env_file)
    if pinned != current:
        print(
            f"{env_file} changed since it was pinned "
            f"(pinned {pinned}, now {current}). "
            "Review the backend and Supabase settings before redeploying.",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR

    print(f"{env_file} matches its pinned baseline.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check which database backend an env file binds and pin it against drift."
    )
    env_file = argparse.ArgumentParser(add_help=False)
    env_file.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Env file to inspect (default: ./.env).",
    )
    baseline = argparse.ArgumentParser(add_help=False)
    baseline.add_argument(
        "--hash-file",
        required=True,
        type=Path,
        help="File holding the pinned SHA-256 of the env file.",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("check", parents=[env_file], help="Resolve the backend only.")
    commands.add_parser(
        "record", parents=[env_file, baseline], help="Resolve the backend and pin the env file."
    )
    commands.add_parser(
        "verify", parents=[env_file, baseline], help="Resolve the backend and compare with the pin."
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        mode = resolve_backend(args.env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(f"Invalid settings in {args.env_file}:\n{exc.json(indent=2)}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except BackendConfigurationError as exc:
        print(f"Backend configuration invalid: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    print(f"Settings OK; database backend resolves to '{mode.value}'.")

    if args.command == "record":
        return pin_baseline(args.env_file, args.hash_file)
    if args.command == "verify":
        return compare_baseline(args.env_file, args.hash_file)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
