# display.py
# All terminal output for the idx-flow CLI.
#
# This module owns presentation entirely. run.py never formats strings;
# it calls named functions here.
#
# Colour language:
#   cyan    : flow / routing events
#   yellow  : input required
#   green   : success
#   red     : failures and terminal errors
#   magenta : server messages

import json

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from idx_flow.models import IdxMessage, IdxStatus, IdxTransaction, NextStep

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def banner(issuer: str, version: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]IDX Remediation Flow[/bold cyan]\n"
            "[dim]Server-driven authentication, one step at a time[/dim]\n\n"
            f"[dim]Issuer  :[/dim] [white]{issuer}[/white]\n"
            f"[dim]Version :[/dim] [white]{version}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def round_start(index: int) -> None:
    console.print()
    console.print(Rule(f"[cyan]ROUND {index}[/cyan]", style="cyan"))


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


def messages(items: list[IdxMessage]) -> None:
    for item in items:
        color = "red" if item.class_ == "ERROR" else "magenta"
        console.print(_label(f"SERVER {item.class_}", color), f"[{color}] {item.message}[/{color}]")


def next_step(step: NextStep) -> None:
    console.print()
    table = Table(box=box.SIMPLE_HEAVY, border_style="yellow", header_style="bold yellow", padding=(0, 1))
    table.add_column("Input", style="bold white", width=20)
    table.add_column("Type", width=10)
    table.add_column("Required", justify="center", width=8)
    table.add_column("Options", style="dim white")

    for item in step.inputs:
        options = ", ".join(str(o.get("value")) for o in item.options or [])
        table.add_row(item.name, item.type or "string", "✓" if item.required else "", _mono(options, 60))

    subtitle = f"[dim]Authenticator: {step.type}[/dim]" if step.type else None
    console.print(
        Panel(
            table,
            title=_label(f"NEXT STEP: {step.name}", "yellow"),
            subtitle=subtitle,
            border_style="yellow",
            padding=(0, 1),
        )
    )


def redirect(step: NextStep) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]Continue at the identity provider:[/white]\n[bold]{step.href}[/bold]\n\n"
            f"[dim]{json.dumps(step.idp or {})}[/dim]",
            title=_label("REDIRECT", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


def finished(transaction: IdxTransaction) -> None:
    console.print()
    if transaction.status == IdxStatus.SUCCESS:
        console.print(
            Panel(
                f"[bold green]Authenticated.[/bold green]\n"
                f"[dim]Interaction code:[/dim] [white]{transaction.interaction_code}[/white]",
                title=_label("SUCCESS ✓", "green"),
                border_style="green",
                padding=(0, 2),
            )
        )
        return
    console.print(
        Panel(
            f"[bold red]Exchange ended with status {transaction.status.value}.[/bold red]\n"
            f"[dim]Offered steps: {', '.join(transaction.available_steps) or 'none'}[/dim]",
            title=_label(f"{transaction.status.value} ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold red]Halted.[/bold red]\n\n[white]{reason}[/white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
