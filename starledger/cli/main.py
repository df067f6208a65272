# starledger/cli/main.py
"""
CLI for issuing challenges, checking wallet signatures and exploring a demo ledger.
"""

import json
import logging
from datetime import datetime, timezone

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from starledger.chain.challenge import make_challenge, parse_challenge
from starledger.chain.ledger import Ledger, unix_now
from starledger.core.errors import MalformedChallenge
from starledger.core.types import Block, StarClaim, CHALLENGE_WINDOW_SECONDS
from starledger.crypto.bitcoin import BitcoinMessageVerifier
from starledger.verify.validator import ChainValidator

app = typer.Typer(
    name="starledger",
    help="Issue challenges, verify signatures and inspect a star registry ledger",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def short(h: str, n: int = 12) -> str:
    return f"{h[:n]}…" if h else "—"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Star registry ledger tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def challenge(
    address: str = typer.Argument(..., help="Wallet address that will sign the challenge"),
):
    """Print the message to sign with your wallet before submitting a star."""
    if not address or ":" in address:
        console.print(f"[red]Invalid address: {address!r}[/]")
        raise typer.Exit(1)
    console.print(make_challenge(address, unix_now()))


@app.command("verify-message")
def verify_message(
    address: str = typer.Argument(..., help="P2PKH wallet address"),
    message: str = typer.Argument(..., help="Signed challenge message"),
    signature: str = typer.Argument(..., help="Base64 signature from the wallet"),
    window: int = typer.Option(
        CHALLENGE_WINDOW_SECONDS,
        "--window",
        envvar="STARLEDGER_CHALLENGE_WINDOW",
        help="Challenge validity window in seconds",
    ),
):
    """Check a wallet signature over a challenge message."""
    try:
        parsed = parse_challenge(message)
    except MalformedChallenge as e:
        console.print(f"[yellow]Warning: {e}[/]")
    else:
        elapsed = parsed.elapsed(unix_now())
        if elapsed > window:
            console.print(f"[yellow]Warning: challenge is {elapsed}s old (window {window}s), a ledger would reject it[/]")
        else:
            console.print(f"  Challenge age: {elapsed}s of {window}s")

    if BitcoinMessageVerifier().verify(message, address, signature):
        console.print(f"[green]✓ Signature is valid for {address}[/]")
    else:
        console.print(f"[red]✗ Signature does not verify for {address}[/]")
        raise typer.Exit(1)


@app.command()
def demo(
    stars: int = typer.Option(3, "--stars", "-n", min=0, help="Number of star claims to append"),
    owner: str = typer.Option("1DemoOwnerAddress", "--owner", help="Owner address recorded in the claims"),
):
    """Build an in-memory ledger, append a few star claims and validate it."""
    ledger = Ledger()
    for i in range(stars):
        ledger.append_block(Block.from_payload(StarClaim(
            owner=owner,
            star={"dec": f"68° 52' {i:02d}.0", "ra": f"16h 29m {i}.0s", "story": f"Demo star #{i}"},
        )))

    table = Table(title="Ledger")
    table.add_column("Height")
    table.add_column("Time")
    table.add_column("Previous")
    table.add_column("Hash")
    table.add_column("Payload")

    for block in ledger.get_chain():
        ts = datetime.fromtimestamp(block.timestamp, timezone.utc).isoformat(timespec="seconds")
        payload = json.dumps(block.get_data().to_dict(), ensure_ascii=False)
        table.add_row(str(block.height), ts, short(block.previous_hash), short(block.hash), payload)

    console.print(table)

    report = ChainValidator().report(ledger.get_chain())
    if report:
        console.print(f"[green]{report}[/] (height {ledger.current_height()})")
    else:
        console.print(f"[red]{report}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
