"""Command that starts the drink controller: admin server and order worker."""

from __future__ import annotations

import argparse
import subprocess
from pathlib import Path

from drinkctl.admin import Admin
from drinkctl.controller import Controller
from drinkctl.database import DEFAULT_DATABASE_PATH, Database, DatabaseError
from drinkctl.device import DEFAULT_DEVICE_PATH, SpiDevice
from drinkctl.log import Logger, get_logger, set_logger
from drinkctl.orders import OrderAdmin
from drinkctl.server import DEFAULT_PORT, Server

DEFAULT_START_SCRIPT = "./start.sh"


def run_start_script(path: str | Path = DEFAULT_START_SCRIPT) -> str:
    """Run the script that prepares the SPI device and return its output."""
    result = subprocess.run(
        [str(path)], capture_output=True, text=True, check=False
    )
    return result.stdout


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the drink controller.")
    parser.add_argument("--start-script", default=DEFAULT_START_SCRIPT)
    parser.add_argument(
        "--no-start-script",
        action="store_true",
        help="do not run the device preparation script",
    )
    parser.add_argument("--database", default=DEFAULT_DATABASE_PATH)
    parser.add_argument("--device", default=DEFAULT_DEVICE_PATH)
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--log-dir", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Start the controller and serve admin clients until interrupted."""
    args = _parser().parse_args(argv)
    if args.log_dir is not None:
        set_logger(Logger(args.log_dir))

    if not args.no_start_script:
        try:
            output = run_start_script(args.start_script)
        except OSError:
            print("[-] Couldn't get spidevice. Exiting")
            return 1
        if output:
            print(output, end="")

    try:
        database = Database(args.database)
        database.create_schema()
    except DatabaseError as exc:
        print(f"[-] Couldn't open database {args.database}: {exc}")
        return 1

    try:
        device = SpiDevice(args.device)
    except OSError as exc:
        print(f"[-] Couldn't open {args.device}: {exc}")
        database.close()
        return 1

    controller = Controller()
    admin = Admin(database, device, controller)
    orders = OrderAdmin(controller, database, device)
    try:
        server = Server(admin.handle, args.host, args.port)
    except OSError as exc:
        print(f"[-] Couldn't bind port {args.port}: {exc}")
        device.close()
        database.close()
        return 1

    print("[+] Starting thread for Admin-control")
    orders.start()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        get_logger().log("Interrupted, shutting down.")
    finally:
        server.shutdown()
        orders.stop()
        orders.join(5)
        device.close()
        database.close()
    return 0