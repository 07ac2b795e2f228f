from __future__ import annotations

import argparse

from rebel_command.cli import TerminalGame


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="rebel_command", description="Rebel Alliance Command campaign engine.")
    commands = parser.add_subparsers(dest="command", required=True)

    play = commands.add_parser("play", help="Play the campaign in this terminal")
    play.add_argument("--name", help="Commander name (prompted for when omitted)")

    commands.add_parser("serve", help="Run the HTTP API with uvicorn")

    args = parser.parse_args(argv)
    if args.command == "play":
        TerminalGame().run(args.name)
    else:
        from rebel_command.main import run

        run()


if __name__ == "__main__":
    main()
