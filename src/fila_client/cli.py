"""Command-line client for the queue service."""

import argparse
import asyncio
import getpass
import json
import sys
from dataclasses import asdict
from pathlib import Path

import aiohttp

from fila_client.adapters.config import AppConfig, ConfigResolver
from fila_client.adapters.storage import JsonFileKeyValueStore
from fila_client.domain.errors import FilaClientError, Unauthorized
from fila_client.domain.models.dashboard import DashboardSnapshot, DashboardStatus
from fila_client.domain.models.session import SessionState
from fila_client.main import Services, build_services, configure_logging

DEFAULT_STORAGE_FILE = Path.home() / ".fila-client" / "session.json"

_ENDED_STATES = (SessionState.EXPIRED, SessionState.LOGGED_OUT, SessionState.UNAUTHENTICATED)


def format_snapshot(snapshot: DashboardSnapshot) -> str:
    """Render the dashboard as plain text, grouped by establishment and queue."""
    summary = snapshot.summary
    lines = [
        f"Aguardando: {summary.total_waiting}  Chamadas: {summary.total_called}  "
        f"Espera média: {summary.avg_wait_time:.0f} min  "
        f"Próxima chamada: {summary.next_call_estimate:.0f} min",
    ]
    if not snapshot.flat_tickets:
        lines.append("Nenhuma senha ativa.")
        return "\n".join(lines)

    for tenant_group in snapshot.tickets_by_tenant.values():
        lines.append(f"\n{tenant_group.tenant.name or tenant_group.tenant.id}")
        for queue_group in tenant_group.queues.values():
            lines.append(f"  {queue_group.queue.name}")
            for ticket in queue_group.tickets:
                position = f" posição {ticket.position}" if ticket.position is not None else ""
                eta = (
                    f" ~{ticket.estimated_time_minutes} min"
                    if ticket.estimated_time_minutes is not None
                    else ""
                )
                lines.append(f"    #{ticket.number} {ticket.status.value}{position}{eta}")
    return "\n".join(lines)


def format_status(status: DashboardStatus) -> str:
    connection = "conectado" if status.is_connected else "desconectado"
    text = f"[{status.session_state.value}, tempo real {connection}]"
    if status.error:
        text += f" {status.error}"
    return text


async def _login(services: Services, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Senha: ")
    session = await services.auth.login_with_credential(args.identifier, password)
    identity = session.identity
    print(f"Login realizado: {(identity.name or identity.identifier) if identity else ''}")


async def _login_google(services: Services, args: argparse.Namespace) -> None:
    session = await services.auth.login_with_oauth()
    identity = session.identity
    print(f"Login com Google realizado: {identity.email if identity else ''}")


async def _dashboard(services: Services, args: argparse.Namespace) -> None:
    engine = services.engine
    if not args.watch:
        snapshot = await engine.load_dashboard()
        if args.json:
            print(json.dumps(asdict(snapshot), default=str, indent=2, ensure_ascii=False))
        else:
            print(format_snapshot(snapshot))
        return

    session_ended = asyncio.Event()

    def show(snapshot: DashboardSnapshot | None, status: DashboardStatus) -> None:
        if status.session_state in _ENDED_STATES:
            session_ended.set()
        if status.loading:
            return
        print(format_status(status))
        if snapshot is not None:
            print(format_snapshot(snapshot))

    snapshot = await engine.start()
    print(format_snapshot(snapshot))
    engine.add_listener(show)
    try:
        await session_ended.wait()
    finally:
        await engine.stop()
    raise Unauthorized()


async def _queues(services: Services, args: argparse.Namespace) -> None:
    queues = await services.engine.get_active_queues()
    if not queues:
        print("Nenhuma fila ativa.")
    for queue in queues:
        print(f"{queue.id}  {queue.name}  (~{queue.avg_service_time_minutes:.0f} min/atendimento)")


async def _logout(services: Services, args: argparse.Namespace) -> None:
    await services.auth.logout()
    print("Sessão encerrada.")


async def _status(services: Services, args: argparse.Namespace) -> None:
    authenticated = await services.auth.is_authenticated()
    identity = services.auth.identity
    if authenticated and identity is not None:
        print(f"Autenticado como {identity.name or identity.identifier}")
    elif authenticated:
        print("Autenticado")
    else:
        print("Não autenticado")
        sys.exit(1)


COMMANDS = {
    "login": _login,
    "login-google": _login_google,
    "dashboard": _dashboard,
    "queues": _queues,
    "logout": _logout,
    "status": _status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fila client - queue tickets from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Log in with CPF (or e-mail) and password
  fila-client login 123.456.789-09

  # Log in with Google
  fila-client login-google

  # Show the dashboard once, or keep it updated in real time
  fila-client dashboard
  fila-client dashboard --watch
        """,
    )
    parser.add_argument(
        "--storage-file",
        help=f"Session file (default: STORAGE_FILE or {DEFAULT_STORAGE_FILE})",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    login_parser = subparsers.add_parser("login", help="Log in with CPF or e-mail")
    login_parser.add_argument("identifier", help="CPF or e-mail")
    login_parser.add_argument("--password", help="Password (prompted when omitted)")

    subparsers.add_parser("login-google", help="Log in with a Google account")

    dashboard_parser = subparsers.add_parser("dashboard", help="Show your tickets")
    dashboard_parser.add_argument(
        "--watch", action="store_true", help="Keep running and apply push updates"
    )
    dashboard_parser.add_argument("--json", action="store_true", help="Output as JSON")

    subparsers.add_parser("queues", help="List active queues")
    subparsers.add_parser("logout", help="End the session")
    subparsers.add_parser("status", help="Check whether the stored session is valid")
    return parser


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig()
    configure_logging(ConfigResolver(config))
    storage_file = args.storage_file or config.storage_file or DEFAULT_STORAGE_FILE

    try:
        async with aiohttp.ClientSession() as http_session:
            services = build_services(
                http_session, config=config, store=JsonFileKeyValueStore(storage_file)
            )
            await services.auth.restore()
            await COMMANDS[args.command](services, args)
    except FilaClientError as e:
        print(f"Erro: {e.message}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    cli_main()
