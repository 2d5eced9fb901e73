"""CLI entry point for the headshot studio."""

from __future__ import annotations

import argparse
import asyncio
import functools
import logging
from pathlib import Path
from typing import Sequence

from headshot_generation import DEFAULT_MODEL, generate_headshot
from headshot_generation.config import load_env_key
from style_catalog import DEFAULT_CATALOG

from . import __version__
from .errors import HeadshotError, SessionError
from .export import DEFAULT_FILENAME
from .session import HeadshotSession, Phase


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI headshot photographer")
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress and API details"
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("styles", help="List the available headshot styles")

    gen = sub.add_parser("generate", help="Generate a headshot from one selfie")
    gen.add_argument("--image", required=True, type=Path, help="Path to the selfie")
    gen.add_argument(
        "--mime-type", default=None, help="Declared image type (guessed from the file name if omitted)"
    )
    gen.add_argument(
        "--style",
        default=None,
        choices=list(DEFAULT_CATALOG.ids()),
        help=f"Style preset (default: {DEFAULT_CATALOG.ids()[0]})",
    )
    gen.add_argument(
        "--prompt", default="", help='Optional custom edits, e.g. "Remove the glasses"'
    )
    gen.add_argument(
        "--outdir", type=Path, default=Path("."), help="Directory for the downloaded headshot"
    )
    gen.add_argument(
        "--output-name", default=DEFAULT_FILENAME, help="Filename for the downloaded headshot"
    )
    gen.add_argument("--model", default=None, help=f"Model override (default: {DEFAULT_MODEL})")
    gen.add_argument(
        "--api-key", default=None, help="API key override (else GEMINI_API_KEY/GOOGLE_API_KEY)"
    )

    inter = sub.add_parser("interactive", help="Step through upload, style and generation")
    inter.add_argument(
        "--outdir", type=Path, default=Path("."), help="Directory for downloaded headshots"
    )
    inter.add_argument("--model", default=None, help=f"Model override (default: {DEFAULT_MODEL})")
    inter.add_argument(
        "--api-key", default=None, help="API key override (else GEMINI_API_KEY/GOOGLE_API_KEY)"
    )

    return parser


def _make_session(args: argparse.Namespace) -> HeadshotSession:
    generator = functools.partial(generate_headshot, model=args.model, api_key=args.api_key)
    return HeadshotSession(generator=generator)


def print_styles() -> None:
    for idx, style in enumerate(DEFAULT_CATALOG, start=1):
        print(f"{idx}. {style.id:<16} {style.name}")


def run_generate(args: argparse.Namespace) -> int:
    with _make_session(args) as session:
        try:
            session.upload_image(args.image, args.mime_type)
        except HeadshotError as exc:
            print(f"Error: {exc.message}")
            return 1
        if args.style:
            session.select_style(args.style)
        session.edit_prompt(args.prompt)

        print(f"[generate] style={session.state.style_id} image={args.image}")
        asyncio.run(session.generate())

        if session.phase is not Phase.READY:
            error = session.state.error
            print(f"Generation failed: {error.message if error else 'unknown error'}")
            return 1

        try:
            out_path = session.download(args.outdir, args.output_name)
        except HeadshotError as exc:
            print(f"Error: {exc.message}")
            return 1
        print(out_path)
        return 0


def _choose_style(session: HeadshotSession) -> None:
    styles = list(session.catalog)
    print("\nStyles:")
    for idx, style in enumerate(styles, start=1):
        marker = "*" if style.id == session.state.style_id else " "
        print(f" {marker} {idx}. {style.name}")
    choice = input(f"Choose a style [1-{len(styles)}, enter keeps current]: ").strip()
    if not choice:
        return
    if choice.isdigit() and 1 <= int(choice) <= len(styles):
        session.select_style(styles[int(choice) - 1].id)
    else:
        print(f"Unknown choice {choice!r}; keeping {session.state.style_id}.")


def run_interactive(args: argparse.Namespace) -> int:
    """Interactive session: mirrors the upload -> customize -> generate screens."""

    print("\n=== AI Headshot Photographer ===\n")
    with _make_session(args) as session:
        try:
            return _interactive_loop(session, args.outdir)
        except (EOFError, KeyboardInterrupt):
            print()
            return 0


def _interactive_loop(session: HeadshotSession, outdir: Path) -> int:
    while True:
        if session.phase is Phase.EMPTY:
            image_input = input("Step 1: path to your photo (blank to quit): ").strip()
            if not image_input:
                return 0
            try:
                session.upload_image(Path(image_input).expanduser())
            except HeadshotError as exc:
                print(f"Error: {exc.message}")
            continue

        _choose_style(session)
        edits = input("(Optional) custom edits: ").strip()
        session.edit_prompt(edits)

        print("\nGenerating...")
        asyncio.run(session.generate())
        if session.phase is Phase.READY:
            try:
                out_path = session.download(outdir)
            except HeadshotError as exc:
                print(f"Error: {exc.message}")
            else:
                print(f"Headshot saved to: {out_path}")
        elif session.state.error:
            print(f"Generation Failed: {session.state.error.message}")

        action = input("\n[r]etry / [s]tart over / [q]uit: ").strip().lower()
        if action.startswith("q"):
            return 0
        if action.startswith("s"):
            session.reset()


def log_level(verbose: bool) -> int:
    return logging.DEBUG if verbose else logging.WARNING


def main(argv: Sequence[str] | None = None) -> int:
    # Load .env if present (ignored if values already in env)
    load_env_key()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=log_level(args.verbose),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version:
        print(__version__)
        return 0

    try:
        if args.command == "styles":
            print_styles()
            return 0
        if args.command == "generate":
            return run_generate(args)
        if args.command == "interactive":
            return run_interactive(args)
    except SessionError as exc:
        parser.error(str(exc))

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
