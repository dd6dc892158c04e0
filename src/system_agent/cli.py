"""Command-line interface for System Agent."""

from __future__ import annotations

import argparse
import shlex
import sys
from typing import List, Optional

from pydantic import ValidationError

from system_agent import __version__
from system_agent.config import Settings
from system_agent.core.container_manager import ContainerManager
from system_agent.core.context import OperationContext
from system_agent.core.errors import ProvisioningError
from system_agent.core.specs import ContainerSpec, RestartPolicy
from system_agent.main import run


def _build_manager() -> ContainerManager:
    return ContainerManager(Settings.from_env())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="system-agent",
        description="System Agent - container and network provisioning"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort the command after this many seconds"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    subparsers.add_parser(
        "bootstrap",
        help="Provision the managed network and the log collector"
    )

    subparsers.add_parser(
        "network",
        help="Ensure the managed network exists"
    )

    collector_parser = subparsers.add_parser(
        "collector",
        help="(Re)create the log collector container"
    )
    collector_parser.add_argument(
        "--name",
        default=None,
        help="Collector container name (default: configured collector hostname)"
    )

    status_parser = subparsers.add_parser(
        "status",
        help="Show whether a container is running, stopped or absent"
    )
    status_parser.add_argument("name")

    run_parser = subparsers.add_parser(
        "run",
        help="Create and start a container on the managed network"
    )
    run_parser.add_argument("image")
    run_parser.add_argument("--name", required=True)
    run_parser.add_argument("--ip", default="", help="Static IP on the managed network")
    run_parser.add_argument("--user", default="", help="uid:gid")
    run_parser.add_argument(
        "--restart",
        default=RestartPolicy.NO.value,
        choices=[p.value for p in RestartPolicy],
    )
    run_parser.add_argument("-p", "--port", dest="ports", action="append", default=[], help="hostPort:containerPort")
    run_parser.add_argument("-v", "--volume", dest="volumes", action="append", default=[], help="hostPath:containerPath")
    run_parser.add_argument("-e", "--env", dest="environment", action="append", default=[], help="KEY=VALUE")
    run_parser.add_argument("--cmd", dest="container_command", default="", help="Command line passed to the container, e.g. \"nginx -g 'daemon off;'\"")

    subparsers.add_parser(
        "version",
        help="Show version information"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the System Agent CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"System Agent version {__version__}")
        return 0

    if args.command == "bootstrap":
        return run(ctx=OperationContext(timeout=args.timeout))

    if args.command not in ("network", "collector", "status", "run"):
        parser.print_help()
        return 1

    ctx = OperationContext(timeout=args.timeout)
    try:
        if args.command == "run":
            # validate before connecting to the runtime
            spec = ContainerSpec(
                image=args.image,
                name=args.name,
                user=args.user,
                restart_policy=args.restart,
                ip_address=args.ip,
                ports=args.ports,
                volumes=args.volumes,
                environment=args.environment,
                commands=shlex.split(args.container_command),
            )
        manager = _build_manager()
    except (ProvisioningError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "network":
            handle = manager.ensure_network(ctx=ctx)
            print(handle.id)
            if handle.warning:
                print(f"Warning: {handle.warning}", file=sys.stderr)

        elif args.command == "collector":
            result = manager.ensure_log_collector(args.name, ctx=ctx)
            print(result.container_id)

        elif args.command == "status":
            state = manager.find(args.name, ctx=ctx)
            if state.exists:
                print(f"{state.status.value} {state.container_id}")
            else:
                print(state.status.value)

        elif args.command == "run":
            result = manager.create_and_start(spec, ctx=ctx)
            print(result.container_id)
            for warning in result.warnings:
                print(f"Warning: {warning}", file=sys.stderr)
    except ProvisioningError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        manager.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
