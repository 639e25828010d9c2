from __future__ import annotations

import questionary
from rich.console import Console

from sharethebill.errors import ValidationError
from sharethebill.services.profile_service import ProfileService

console = Console()


def sync_wallet_menu(profile_service: ProfileService) -> None:
    console.print()
    console.print("[bold]Sync Wallet Address[/bold]", style="cyan")

    fid_text = questionary.text("FID:").ask()
    if not fid_text or not fid_text.strip().isdigit():
        console.print("[red]Invalid FID.[/red]")
        return
    fid = int(fid_text.strip())

    profile = profile_service.get_profile(fid)
    if profile and profile.wallet_address:
        console.print(f"  Current address: {profile.wallet_address}")

    address = questionary.text("Wallet address (0x...):").ask()
    if not address:
        return

    try:
        profile = profile_service.sync_wallet(fid, address)
    except ValidationError as exc:
        console.print(f"[red]{exc.message}[/red]")
        return
    console.print(f"[green]Wallet saved for FID {fid}: {profile.wallet_address}[/green]")
