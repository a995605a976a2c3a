# run.py
# CLI entry point. Config and wiring only; no flow logic lives here.
#
#   IDX_ISSUER=https://example.okta.com/oauth2/default \
#   idx-flow --interaction-handle <handle> --username ada

import argparse
import logging

from rich.logging import RichHandler
from rich.prompt import Prompt

from idx_flow import display
from idx_flow.authenticate import authenticate
from idx_flow.client import AuthClient
from idx_flow.config import IdxConfig
from idx_flow.errors import AuthSdkError
from idx_flow.models import IdxStatus, IdxTransaction, NextStep

MAX_ROUNDS = 20


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="idx-flow", description="Drive an IDX sign-in interactively.")
    handles = parser.add_mutually_exclusive_group()
    handles.add_argument("--interaction-handle")
    handles.add_argument("--state-handle")
    parser.add_argument("--username")
    parser.add_argument("--cancel", action="store_true", help="Cancel the stored exchange and exit.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _ask(step: NextStep) -> dict:
    """Prompt for every input the pending step needs."""
    values: dict = {}
    for item in step.inputs:
        label = item.label or item.name
        if item.options:
            choices = [str(o.get("value")) for o in item.options if o.get("value") is not None]
            values[item.name] = Prompt.ask(label, choices=choices)
        elif item.required:
            values[item.name] = Prompt.ask(label, password=bool(item.secret))
        else:
            answer = Prompt.ask(label, password=bool(item.secret), default="")
            if answer:
                values[item.name] = answer
    return values


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )

    config = IdxConfig.from_env()
    client = AuthClient(config)
    display.banner(config.issuer, config.version)

    options: dict = {
        "interaction_handle": args.interaction_handle,
        "state_handle": args.state_handle,
        "cancel": args.cancel,
    }
    if args.username:
        options["username"] = args.username

    try:
        for index in range(1, MAX_ROUNDS + 1):
            display.round_start(index)
            transaction: IdxTransaction = authenticate(client, options)
            display.messages(transaction.messages)

            if transaction.status != IdxStatus.PENDING:
                display.finished(transaction)
                return 0 if transaction.status == IdxStatus.SUCCESS else 1

            step = transaction.next_step
            if step is None:
                display.finished(transaction)
                return 1
            if step.name == "redirect-idp":
                display.redirect(step)
                return 0

            display.next_step(step)
            # The stored document carries the exchange forward from here.
            options = _ask(step)
    except AuthSdkError as exc:
        display.halt(str(exc))
        return 2
    finally:
        client.transport.close()

    display.halt(f"Gave up after {MAX_ROUNDS} rounds.")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
