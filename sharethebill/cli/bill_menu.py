from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from sharethebill.errors import LedgerError
from sharethebill.models import format_amount
from sharethebill.models.bill import Bill, BillStatus, Participant, ParticipantStatus
from sharethebill.services.bill_service import BillService

console = Console()

STATUS_STYLES = {
    BillStatus.PENDING: "yellow",
    BillStatus.COLLECTING: "cyan",
    BillStatus.COMPLETED: "green",
    BillStatus.CANCELLED: "red",
    BillStatus.DRAFT: "dim",
}


def _ask_fid(prompt: str) -> int | None:
    while True:
        val = questionary.text(prompt).ask()
        if val is None or not val.strip():
            return None
        if val.strip().isdigit():
            return int(val.strip())
        console.print("[red]Invalid FID. Enter a number.[/red]")


def _payment_note(p: Participant) -> str:
    if p.status == ParticipantStatus.PAID:
        return p.payment_hash or ""
    if p.status == ParticipantStatus.FAILED:
        return p.failure_reason or "failed"
    return ""


def _show_bill_detail(bill: Bill) -> None:
    """Display a bill's participants and payment state."""
    currency = bill.currency.value
    console.print()
    console.print(f"[bold]{bill.title}[/bold] ({bill.id})")
    if bill.description:
        console.print(f"  {bill.description}")
    style = STATUS_STYLES.get(bill.status, "white")
    console.print(f"  Status: [{style}]{bill.status.value}[/{style}]  Split: {bill.split_type.value}")

    table = Table()
    table.add_column("FID", justify="right")
    table.add_column("Name")
    table.add_column("Owed", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Payment")

    for p in bill.participants:
        table.add_row(
            str(p.fid),
            p.label,
            format_amount(p.amount_owed, currency),
            p.status.value,
            _payment_note(p),
        )

    console.print(table)
    console.print(f"  [bold]Total: {format_amount(bill.total_amount, currency)}[/bold]")
    console.print(f"  Pay to: {bill.creator_wallet_address}")
    if bill.due_date:
        console.print(f"  Due: {bill.due_date.isoformat()}")
    if bill.tags:
        console.print(f"  Tags: {', '.join(bill.tags)}")


def list_bills_menu(bill_service: BillService) -> None:
    fid = _ask_fid("FID of the user:")
    if fid is None:
        return

    summaries = bill_service.list_bills_for_user(fid)
    if not summaries:
        console.print("[yellow]No bills found for this user.[/yellow]")
        return

    table = Table(title=f"Bills for FID {fid}")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Total", justify="right")
    table.add_column("Your share", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("People", justify="right")
    table.add_column("Creator", justify="center")

    for i, s in enumerate(summaries, 1):
        style = STATUS_STYLES.get(s.status, "white")
        table.add_row(
            str(i),
            s.title,
            format_amount(s.total_amount),
            format_amount(s.your_share),
            f"[{style}]{s.status.value}[/{style}]",
            str(s.participant_count),
            "yes" if s.is_creator else "",
        )
    console.print(table)

    choices = [f"{i}. {s.title}" for i, s in enumerate(summaries, 1)]
    choices.append("Back")
    choice = questionary.select("Select a bill:", choices=choices).ask()
    if choice is None or choice == "Back":
        return

    idx = int(choice.split(".")[0]) - 1
    bill_actions_menu(summaries[idx].id, fid, bill_service)


def bill_actions_menu(bill_id: str, fid: int, bill_service: BillService) -> None:
    while True:
        try:
            bill = bill_service.get_bill(bill_id)
        except LedgerError as exc:
            console.print(f"[red]{exc.message}[/red]")
            return
        _show_bill_detail(bill)

        choice = questionary.select(
            "Action:",
            choices=["Send payment reminders", "Cancel bill", "Delete bill", "Back"],
        ).ask()

        if choice is None or choice == "Back":
            return
        try:
            if choice == "Send payment reminders":
                sent = bill_service.send_payment_reminders(bill_id, fid)
                console.print(f"[green]{sent} reminder(s) sent.[/green]")
            elif choice == "Cancel bill":
                if questionary.confirm("Cancel this bill?", default=False).ask():
                    bill_service.cancel_bill(bill_id, fid)
                    console.print("[green]Bill cancelled.[/green]")
            elif choice == "Delete bill":
                if questionary.confirm("Delete this bill permanently?", default=False).ask():
                    bill_service.delete_bill(bill_id, fid)
                    console.print("[green]Bill deleted.[/green]")
                    return
        except LedgerError as exc:
            console.print(f"[red]{exc.kind}: {exc.message}[/red]")


def due_date_reminders_menu(bill_service: BillService) -> None:
    fid = _ask_fid("FID of the bill creator:")
    if fid is None:
        return
    sent = bill_service.send_due_date_reminders(fid)
    console.print(f"[green]{sent} due-date reminder(s) sent.[/green]")
