from __future__ import annotations

import argparse
import logging
import os
import socket
import sys

import uvicorn

from anomaly_board.config import BASE_URL_ENV, CONFIG_PATH_ENV, ConfigValidator, create_config_manager


def _is_port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def _find_port(host: str, preferred: int, span: int = 20) -> int:
    if _is_port_available(host, preferred):
        return preferred

    for port in range(preferred + 1, preferred + span + 1):
        if _is_port_available(host, port):
            return port

    return preferred


def main() -> None:
    parser = argparse.ArgumentParser(description="Anomaly board API launcher")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8010)
    parser.add_argument("--config", default="", help="path to config.json")
    parser.add_argument("--upstream", default="", help="override upstream API base URL")
    args = parser.parse_args()

    # anomaly_board.main reads both variables at import time
    if args.config:
        os.environ[CONFIG_PATH_ENV] = args.config
    if args.upstream:
        os.environ[BASE_URL_ENV] = args.upstream

    config = create_config_manager().get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    errors = ConfigValidator.validate_app_config(config)
    if errors:
        for error in errors:
            print(f"Config error: {error}")
        sys.exit(2)

    from anomaly_board.main import app

    host = args.host
    selected_port = _find_port(host, args.port)
    if selected_port != args.port:
        print(f"Port {args.port} is busy, fallback to {selected_port}.")

    print(f"Starting anomaly board on http://{host}:{selected_port} (upstream {config.api_base_url})")
    uvicorn.run(
        app,
        host=host,
        port=selected_port,
        log_level=config.log_level.lower(),
        loop="asyncio",
        http="h11",
    )


if __name__ == "__main__":
    main()
