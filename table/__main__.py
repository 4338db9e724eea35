import argparse
import asyncio
import logging

from engine.models import TableConfig

from .server import run_server

logging.basicConfig(level=logging.INFO)


def main() -> None:
    parser = argparse.ArgumentParser(description="Hold'em table: one human seat against four house bots")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--bot-delay-min", type=int, default=1_500, help="Minimum bot think time in milliseconds")
    parser.add_argument("--bot-delay-max", type=int, default=2_500, help="Maximum bot think time in milliseconds")
    parser.add_argument("--debug", action="store_true", help="Log engine decisions")
    args = parser.parse_args()

    if args.debug:
        logging.getLogger("holdem_engine").setLevel(logging.DEBUG)
    if args.bot_delay_max < args.bot_delay_min:
        parser.error("--bot-delay-max must be at least --bot-delay-min")

    config = TableConfig(
        starting_stack=args.starting_stack,
        sb=args.sb,
        bb=args.bb,
        bot_delay_ms=(args.bot_delay_min, args.bot_delay_max),
    )
    asyncio.run(run_server(args.host, args.port, config))


if __name__ == "__main__":
    main()
