"""
Command-line interface for the Shared-Medium Hub Simulator.

    hub_simulator hub stnA.cfg stnB.cfg stnC.cfg stnD.cfg --duration 30
    hub_simulator station stnA.cfg

The station command is what the hub runs for each station process: frames
travel on its standard input and output, so everything it reports goes to
standard error.
"""

import argparse
import sys

from HUB_SIM.config import HUB_RUN_TIME, MAX_STNS
from HUB_SIM.datalink.station import StationAgent
from HUB_SIM.errors import CapacityExceeded, StationConfigError
from HUB_SIM.network import Network
from HUB_SIM.physical.channel import Endpoint
from HUB_SIM.utils.logging_config import configure_logging
from HUB_SIM.utils.station_config import load_station_config


def build_parser():
    parser = argparse.ArgumentParser(
        prog="hub_simulator",
        description="Simulate stations sharing one hub with a stop-and-wait frame protocol.",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    hub_parser = subparsers.add_parser("hub", help="Run a hub and its stations")
    hub_parser.add_argument("configs", nargs="+", metavar="CONFIG",
                            help=f"Station configuration files (at most {MAX_STNS})")
    hub_parser.add_argument("--duration", type=float, default=HUB_RUN_TIME,
                            help=f"Seconds to relay before shutting down (default {HUB_RUN_TIME:g})")
    hub_parser.add_argument("--threads", action="store_true",
                            help="Run stations as threads of the hub instead of processes")
    hub_parser.set_defaults(func=run_hub)

    station_parser = subparsers.add_parser("station", help="Run one station on standard input/output")
    station_parser.add_argument("config", metavar="CONFIG", help="Station configuration file")
    station_parser.set_defaults(func=run_station)

    for sub in (hub_parser, station_parser):
        sub.add_argument("--log-dir", default=None, help="Also write per-component logs to this directory")
        sub.add_argument("-v", "--verbose", action="store_true", help="Log frame-level detail")

    return parser


def _station_args(args):
    """Logging options forwarded to station processes."""
    forwarded = []
    if args.log_dir:
        forwarded += ["--log-dir", args.log_dir]
    if args.verbose:
        forwarded.append("--verbose")
    return forwarded


def run_hub(args):
    configure_logging(args.verbose, args.log_dir)
    network = Network("hub", station_args=_station_args(args))

    for path in args.configs:
        try:
            if args.threads:
                network.add_local_station(load_station_config(path))
            else:
                network.add_station_process(path)
        except StationConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
        except CapacityExceeded as e:
            print(f"Error: {path} rejected: {e}", file=sys.stderr)

    if not len(network.hub.registry):
        print("Error: no station could be started", file=sys.stderr)
        return 1

    network.display()
    network.run(args.duration)
    return 0


def run_station(args):
    configure_logging(args.verbose, args.log_dir)
    try:
        config = load_station_config(args.config)
    except StationConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    agent = StationAgent(
        config.station_id,
        config.destination_id,
        config.messages,
        inbound=Endpoint(sys.stdin.fileno(), "stdin"),
        outbound=Endpoint(sys.stdout.fileno(), "stdout"),
    )
    return 0 if agent.run() else 1


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)
