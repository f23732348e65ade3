"""
CLI for issuing ownership challenges, signing them, and inspecting exported star ledgers.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from starledger.chain import challenge as challenges
from starledger.chain.blockchain import Blockchain
from starledger.chain.registry import StarRegistry
from starledger.config import Settings, get_snapshot_path
from starledger.core.errors import DecodeError, StarLedgerError
from starledger.core.types import StarClaim
from starledger.crypto.signatures import BitcoinMessageVerifier, WalletKey
from starledger.log import configure_logging
from starledger.storage import read_chain, write_chain
from starledger.verify.verifier import ChainVerifier

app = typer.Typer(
    name="starledger",
    help="Register stars on an in-memory ledger and inspect exported chains",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def _load_snapshot(file: Optional[Path]):
    path = get_snapshot_path(file)
    if not path.exists():
        console.print(f"[red]Snapshot file not found: {path}[/]")
        console.print("[yellow]To get started:[/]")
        console.print("  • Export a chain first: starledger demo --output chain.jsonl")
        console.print("  • Set env var: export STARLEDGER_SNAPSHOT_PATH=/path/to/chain.jsonl")
        raise typer.Exit(1)
    try:
        return path, read_chain(path)
    except DecodeError as e:
        console.print(f"[red]Snapshot is corrupt: {e}[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides STARLEDGER_LOG_LEVEL env var)",
    ),
):
    """Star registry backed by a hash-linked ledger."""
    configure_logging(log_level or Settings.from_env().log_level)


@app.command()
def challenge(
    address: str = typer.Argument(..., help="Wallet address that will sign the challenge"),
):
    """Print an ownership challenge message for ADDRESS."""
    typer.echo(challenges.issue(address))


@app.command()
def keygen(
    testnet: Optional[bool] = typer.Option(None, "--testnet/--mainnet", help="Address network (default: STARLEDGER_TESTNET)"),
):
    """Generate a wallet key and print its address and WIF."""
    if testnet is None:
        testnet = Settings.from_env().testnet
    key = WalletKey.generate(testnet=testnet)
    typer.echo(f"address: {key.address}")
    typer.echo(f"wif:     {key.to_wif()}")


@app.command()
def sign(
    message: str = typer.Argument(..., help="Message to sign"),
    wif: str = typer.Option(..., "--wif", help="Private key in Wallet Import Format"),
):
    """Sign MESSAGE with a WIF key (base64 compact signature)."""
    try:
        key = WalletKey.from_wif(wif)
    except ValueError as e:
        console.print(f"[red]Invalid WIF: {e}[/]")
        raise typer.Exit(1)
    typer.echo(key.sign_message(message))


@app.command("verify-message")
def verify_message(
    message: str = typer.Argument(...),
    address: str = typer.Argument(...),
    signature: str = typer.Argument(...),
):
    """Check a signed message against an address."""
    if BitcoinMessageVerifier().verify(message, address, signature):
        console.print(f"[green]✓ Signature is valid for {address}[/]")
    else:
        console.print(f"[red]✗ Signature does not verify for {address}[/]")
        raise typer.Exit(1)


@app.command()
def demo(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Snapshot file (default: STARLEDGER_SNAPSHOT_PATH or ./starledger-chain.jsonl)"),
    stars: int = typer.Option(3, "--stars", "-n", min=0, help="Number of stars to register"),
    owners: int = typer.Option(2, "--owners", min=1, help="Number of wallets registering stars"),
):
    """Register stars from generated wallets and export the chain."""
    settings = Settings.from_env()
    blockchain = Blockchain()
    registry = StarRegistry(blockchain, window_seconds=settings.challenge_window)
    wallets = [WalletKey.generate(testnet=settings.testnet) for _ in range(owners)]

    try:
        for i in range(stars):
            wallet = wallets[i % owners]
            message = registry.request_message_ownership_verification(wallet.address)
            registry.submit_star(
                wallet.address,
                message,
                wallet.sign_message(message),
                {"dec": f"68° 52' {i}.{i}", "ra": f"16h 29m {i}.0s", "story": f"Demo star #{i}"},
            )
    except StarLedgerError as e:
        console.print(f"[red]Submission failed: {e}[/]")
        raise typer.Exit(1)

    out_path = get_snapshot_path(output)
    count = write_chain(blockchain.chain, out_path)
    console.print(f"[green]Exported {count} blocks to {out_path}[/]")
    for wallet in wallets:
        console.print(f"  {wallet.address}: {len(blockchain.get_stars_by_wallet_address(wallet.address))} stars")


@app.command()
def verify(
    file: Optional[Path] = typer.Argument(None, help="Snapshot file to verify"),
):
    """Verify an exported chain (heights, hashes, linkage, bodies)."""
    path, blocks = _load_snapshot(file)
    result = ChainVerifier().verify(blocks)

    if result.is_valid:
        console.print(f"[green]✓ Chain in '{path.name}' is valid[/]")
        console.print(f"  {result.message} ({len(blocks)} blocks)")
    else:
        console.print(f"[red]✗ Verification failed for '{path.name}'[/]")
        for failure in result.failures:
            console.print(f"  • [{failure.index}] {failure.category}: {failure.message}", soft_wrap=True)
        raise typer.Exit(1)


@app.command()
def blocks(
    file: Optional[Path] = typer.Argument(None, help="Snapshot file"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of most recent blocks to show"),
):
    """Show the most recent blocks of an exported chain."""
    _, chain = _load_snapshot(file)

    table = Table(title="Blocks")
    table.add_column("Height")
    table.add_column("Time")
    table.add_column("Hash")
    table.add_column("Owner")

    for block in chain[-limit:]:
        try:
            payload = block.decode_body()
        except DecodeError:
            payload = None
        owner = payload.owner if isinstance(payload, StarClaim) else "—"
        table.add_row(str(block.height), str(block.time), (block.hash or "")[:16], owner)

    console.print(table)


@app.command()
def stars(
    address: str = typer.Argument(..., help="Owner wallet address"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Snapshot file"),
):
    """List stars owned by ADDRESS in an exported chain."""
    _, chain = _load_snapshot(file)

    found = []
    for block in chain:
        try:
            payload = block.decode_body()
        except DecodeError as e:
            console.print(f"[red]Block {block.height} is corrupt: {e}[/]")
            raise typer.Exit(1)
        if isinstance(payload, StarClaim) and payload.owner == address:
            found.append((block.height, payload))

    if not found:
        console.print(f"[yellow]No stars found for {address}[/]")
        return

    for height, claim in found:
        console.print(f"[bold cyan]{height:4d}[/] {claim.star}", soft_wrap=True)


if __name__ == "__main__":
    app()
