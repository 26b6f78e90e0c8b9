# Entry point: serves the eco-trip game over HTTP + websocket.
#   python main.py --port 8000
# then open http://127.0.0.1:8000/map or connect a client to /ws

import argparse
import logging

from aiohttp import web

from config import GameConfig, SERVER_HOST, SERVER_PORT, OSRM_URL
from game_server import create_app


def parse_args():
    p = argparse.ArgumentParser(description="Eco-trip transport game server")
    p.add_argument("--host", default=SERVER_HOST)
    p.add_argument("--port", type=int, default=SERVER_PORT)
    p.add_argument("--osrm", default=OSRM_URL, help="OSRM base url")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    config = GameConfig(osrm_url=args.osrm)
    web.run_app(create_app(config), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
