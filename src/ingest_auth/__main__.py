# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
ingest-auth CLI entry point.

Usage:
    ingest-auth serve --config ingest-auth.toml
    ingest-auth serve --config ingest-auth.toml --port 9000

Without ``--config`` the file is looked up via INGEST_AUTH_CONFIG,
./ingest-auth.toml and ./config.toml.
"""

from __future__ import annotations

import logging
import sys

from .config import ConfigError, find_config_file, load_config, server_settings
from .exceptions import AuthConfigError, EntropyError

USAGE = """\
Usage: ingest-auth serve [options]

Options:
  --config FILE     TOML configuration file
  --host HOST       Override [server] host
  --port PORT       Override [server] port
  --version, -v     Show version
  --help, -h        Show this help"""


def _parse_serve_args(argv: list[str]) -> dict[str, str]:
    """Parse ``--name value`` / ``--name=value`` pairs for serve."""
    options: dict[str, str] = {}
    args = list(argv)
    while args:
        arg = args.pop(0)
        if not arg.startswith("--"):
            raise ConfigError(f"unexpected argument '{arg}'")
        name, sep, value = arg[2:].partition("=")
        if name not in ("config", "host", "port"):
            raise ConfigError(f"unknown option '--{name}'")
        if not sep:
            if not args:
                raise ConfigError(f"option '--{name}' requires a value")
            value = args.pop(0)
        options[name] = value
    return options


def cmd_serve(argv: list[str]) -> int:
    """Run the management server."""
    from .server import ManagementServer

    try:
        options = _parse_serve_args(argv)
        config_path = options.get("config") or find_config_file()
        if config_path is None:
            raise ConfigError("no configuration file found (use --config)")
        config = load_config(config_path)
        if "host" in options or "port" in options:
            server_section = dict(config.get("server") or {})
            server_section.update({k: v for k, v in options.items() if k in ("host", "port")})
            config["server"] = server_section
        settings = server_settings(config)
        logging.basicConfig(
            level=settings["log_level"].upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        server = ManagementServer(config)
    except (ConfigError, AuthConfigError, EntropyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("ingest-auth starting...", flush=True)
    print(f"Config: {config_path}", flush=True)
    print(f"Server: http://{settings['host']}:{settings['port']}", flush=True)
    print(flush=True)

    try:
        server.run()
    except KeyboardInterrupt:
        print("\nShutdown.")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = sys.argv[1:] if argv is None else list(argv)

    if "--version" in args or "-v" in args:
        from . import __version__

        print(f"ingest-auth {__version__}")
        return 0

    if "--help" in args or "-h" in args or not args:
        print(USAGE)
        return 0

    subcommand = args[0]
    if subcommand != "serve":
        print(f"Error: unknown subcommand '{subcommand}'", file=sys.stderr)
        return 1

    return cmd_serve(args[1:])


if __name__ == "__main__":
    sys.exit(main())
