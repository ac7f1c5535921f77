import argparse

from .models import Base
from .seeds.main import seed_all_data
from .session import engine

from app.utils.logging import get_logger

logger = get_logger()


def create_tables():
    Base.metadata.create_all(engine)
    logger.info("Created all tables.")


def drop_tables():
    Base.metadata.drop_all(engine)
    logger.info("Dropped all tables.")


def reset_db(seed: bool = True):
    logger.info("Resetting database...")
    drop_tables()
    create_tables()
    if seed:
        seed_all_data()
    logger.info("Database reset complete.")


def main():
    parser = argparse.ArgumentParser(description="Manage the placement portal schema")
    parser.add_argument(
        "command",
        choices=["create", "drop", "seed", "reset"],
        nargs="?",
        default="reset",
    )
    parser.add_argument(
        "--no-seed", action="store_true", help="Skip demo data when resetting"
    )
    args = parser.parse_args()

    if args.command == "create":
        create_tables()
    elif args.command == "drop":
        drop_tables()
    elif args.command == "seed":
        seed_all_data()
    else:
        reset_db(seed=not args.no_seed)


if __name__ == "__main__":
    main()
