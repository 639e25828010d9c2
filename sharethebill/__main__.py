from sharethebill.cli.app import main_menu
from sharethebill.db import initialize_db
from sharethebill.logging import configure_logging


def main() -> None:
    configure_logging()
    initialize_db()
    main_menu()


if __name__ == "__main__":
    main()
