import questionary
from rich.console import Console

from sharethebill.cli.bill_menu import due_date_reminders_menu, list_bills_menu
from sharethebill.cli.profile_menu import sync_wallet_menu
from sharethebill.notify.factory import get_notification_sink
from sharethebill.repositories.factory import get_bill_repository, get_profile_repository
from sharethebill.services.bill_service import BillService
from sharethebill.services.notification_service import NotificationService
from sharethebill.services.profile_service import ProfileService

console = Console()


def _build_services() -> tuple[BillService, ProfileService]:
    profile_service = ProfileService(get_profile_repository())
    bill_service = BillService(
        get_bill_repository(),
        profile_service,
        NotificationService(get_notification_sink()),
    )
    return bill_service, profile_service


def main_menu() -> None:
    bill_service, profile_service = _build_services()

    console.print()
    console.print("[bold]ShareTheBill Admin[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "List Bills for User",
                "Send Due-Date Reminders",
                "Sync Wallet Address",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Bye![/bold]")
            break
        elif choice == "List Bills for User":
            list_bills_menu(bill_service)
        elif choice == "Send Due-Date Reminders":
            due_date_reminders_menu(bill_service)
        elif choice == "Sync Wallet Address":
            sync_wallet_menu(profile_service)
