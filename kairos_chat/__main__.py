import argparse
import logging

import uvicorn

from .config import HOST, LOG_LEVEL, PORT, RELOAD


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="kairos-chat", description="Run the two-persona chat and image dashboard.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--reload", action="store_true", default=RELOAD)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("kairos_chat.api:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
