"""CLI entry point for the CWA forecast proxy."""

import argparse
import json
import logging
import sys

from cwa_proxy.config.loader import get_config_value, load_config, redacted
from cwa_proxy.models.errors import ForecastProxyError
from cwa_proxy.pipeline.forecast_pipeline import ForecastPipeline


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cwa-proxy",
        description="CWA 36-hour weather forecast proxy",
    )
    parser.add_argument("--config", default=None, help="Config YAML path")
    parser.add_argument(
        "--log-level", default="INFO", help="Logging level (default: INFO)"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default=None, help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Bind port")

    # fetch
    fetch_p = sub.add_parser("fetch", help="Fetch one city's forecast and print it")
    fetch_p.add_argument("city", nargs="?", default=None, help="Location name, e.g. 臺北市")

    # config show
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    show_p = config_sub.add_parser("show", help="Display current config")
    show_p.add_argument("--key", default=None, help="Dotted key, e.g. upstream.max_attempts")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "fetch":
        return _cmd_fetch(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_serve(config, args) -> int:
    import uvicorn

    from cwa_proxy.api import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    if not config.api_key:
        logging.getLogger(__name__).warning(
            "CWA_API_KEY not set; weather requests will fail with 500"
        )
    uvicorn.run(create_app(config), host=host, port=port)
    return 0


def _cmd_fetch(config, args) -> int:
    pipeline = ForecastPipeline.from_config(config)
    city = args.city or config.default_city
    try:
        forecast = pipeline.run(city)
    except ForecastProxyError as e:
        print(json.dumps(e.to_dict(), ensure_ascii=False), file=sys.stderr)
        return 1
    print(json.dumps({"success": True, "data": forecast.to_dict()}, ensure_ascii=False, indent=2))
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        data = redacted(config)
        if args.key:
            try:
                value = get_config_value(config, args.key)
            except (KeyError, IndexError, ValueError) as e:
                print(f"Error: {e}")
                return 1
            if args.key == "api_key":
                value = data["api_key"]
            elif hasattr(value, "model_dump"):
                value = value.model_dump(mode="json")
            print(json.dumps(value, ensure_ascii=False, indent=2))
            return 0
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return 0
    else:
        print("Use: config show [--key dotted.key]")
        return 1
