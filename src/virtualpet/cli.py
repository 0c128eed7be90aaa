import argparse
import json
import logging
import sys
from pathlib import Path

from .catalog import Catalog
from .guardian import GuardianStore
from .logging_config import configure_logging
from .paths import AppPaths
from .persistence import SaveError, SaveManager
from .pet import PET_TYPES
from .session import GameSession, new_game
from .settings import Settings

# Commands that act on a loaded pet and then save it.
_ACTIONS = {
    "feed": lambda s, a: s.feed(a.item),
    "play": lambda s, a: s.play(a.item),
    "gift": lambda s, a: s.gift(),
    "exercise": lambda s, a: s.exercise(),
    "vet": lambda s, a: s.visit_vet(),
    "sleep": lambda s, a: s.sleep(),
    "buy": lambda s, a: s.buy(a.item, qty=a.qty),
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="virtualpet",
        description="Virtual pet simulation: raise, feed and dress up a pet from the terminal.",
    )
    parser.add_argument("--save-dir", dest="save_dir", type=Path, default=None, help="Directory holding save files.")
    parser.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a user settings YAML file to load/override defaults.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Create a new pet and save it.")
    p.add_argument("name")
    p.add_argument("--type", dest="pet_type", choices=sorted(PET_TYPES), default="PetOption1")

    sub.add_parser("list", help="List saved pets.")

    p = sub.add_parser("status", help="Show a pet.")
    p.add_argument("name")

    p = sub.add_parser("buy", help="Buy an item from the shop.")
    p.add_argument("name")
    p.add_argument("item")
    p.add_argument("--qty", type=int, default=1)

    for cmd, item_help in (("feed", "Food to feed."), ("play", "Toy to play with.")):
        p = sub.add_parser(cmd)
        p.add_argument("name")
        p.add_argument("item", help=item_help)

    for cmd in ("gift", "exercise", "vet", "sleep"):
        p = sub.add_parser(cmd)
        p.add_argument("name")

    p = sub.add_parser("tick", help="Advance the decline clock.")
    p.add_argument("name")
    p.add_argument("--count", type=int, default=1)

    p = sub.add_parser("revive", help="Guardian: bring a dead pet back.")
    p.add_argument("name")
    p.add_argument("--password", required=True)

    return parser.parse_args(argv)


def _print_snapshot(session: GameSession) -> None:
    print(json.dumps(session.snapshot(), indent=2, sort_keys=True))


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(level=logging.DEBUG if args.debug else logging.WARNING)

    paths = AppPaths()
    settings = Settings.load(user_path=args.settings_path)
    catalog = Catalog.load_default()
    save_dir = args.save_dir or paths.save_dir
    manager = SaveManager(save_dir, catalog, settings)

    if args.command == "list":
        for path in manager.list_saves():
            print(path.stem)
        return 0

    if args.command == "new":
        session = new_game(args.name, args.pet_type, catalog, settings)
        try:
            manager.create(session.pet, session.inventory)
        except SaveError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        _print_snapshot(session)
        return 0

    data = manager.load(args.name)
    if data is None:
        print(f"No usable save for {args.name!r}", file=sys.stderr)
        return 1
    session = GameSession(data.pet, data.inventory, catalog, settings, total_play_time=data.total_play_time)

    if args.command == "status":
        _print_snapshot(session)
        return 0

    store = GuardianStore(paths.guardian_file)
    ledger = store.load()
    ok = True
    if args.command == "revive":
        if not ledger.authenticate(args.password):
            print("Incorrect guardian password", file=sys.stderr)
            return 1
        ok = ledger.revive_pet(session.pet)
    elif not ledger.is_play_allowed():
        print("Play is not allowed at this hour", file=sys.stderr)
        return 1
    elif args.command == "tick":
        session.tick(args.count)
    else:
        ok = _ACTIONS[args.command](session, args)

    saved = manager.save(session.pet, session.inventory, previous_play_time=data.total_play_time)
    session.total_play_time = saved.total_play_time
    ledger.update_after_session(saved.total_play_time - data.total_play_time)
    store.save(ledger)
    _print_snapshot(session)
    if not ok:
        print(f"{args.command} was refused", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
