import argparse

from billiards.core.config import settings
from billiards.core.log import setup_logging
from billiards.db.init_db import drop_db, migrate
from billiards.db.session import SessionLocal, engine
from billiards.services.matches import backfill_match_stats
from billiards.services.players import seed_default_players


def cmd_migrate(args):
    db = SessionLocal()
    try:
        summary = migrate(db)
    finally:
        db.close()
    print(f"Migrate OK: {summary}")


def cmd_drop(args):
    if not args.yes:
        print("Refusing to drop every table without --yes")
        return 1
    drop_db(bind=engine)
    print(f"Dropped all tables on {settings.DATABASE_URL}")


def cmd_reset(args):
    if cmd_drop(args):
        return 1
    cmd_migrate(args)


def cmd_backfill_stats(args):
    db = SessionLocal()
    try:
        filled = backfill_match_stats(db)
    finally:
        db.close()
    print(f"Backfill OK ({filled} match(es) filled)")


def cmd_seed_players(args):
    names = args.names or settings.default_players
    db = SessionLocal()
    try:
        created = seed_default_players(db, names)
    finally:
        db.close()
    if created:
        print(f"Seed PLAYERS OK: {', '.join(p.name for p in created)}")
    else:
        print("Players already seeded, nothing to do")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Billiards database maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("migrate", help="create tables, seed badges, backfill stats").set_defaults(func=cmd_migrate)

    p = sub.add_parser("drop", help="drop every table")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(func=cmd_drop)

    p = sub.add_parser("reset", help="drop then migrate")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(func=cmd_reset)

    sub.add_parser("backfill-stats", help="write stat rows for matches that have none").set_defaults(
        func=cmd_backfill_stats
    )

    p = sub.add_parser("seed-players", help="create missing default players")
    p.add_argument("names", nargs="*", help="names to seed (default: DEFAULT_PLAYERS)")
    p.set_defaults(func=cmd_seed_players)

    args = parser.parse_args(argv)
    setup_logging(settings)
    return args.func(args) or 0


if __name__ == "__main__":
    raise SystemExit(main())
