#!/usr/bin/env python3
"""
healthdash CLI entry point
Typed commands for managing per-user wellness records.
"""
import argparse
import getpass
import logging
import os
import sys
from functools import partial

from dateutil import parser as dateparser
from pydantic import ValidationError

from healthdash.config import load_settings
from healthdash.domains import progress
from healthdash.domains import tracker as tracker_domain
from healthdash.errors import HealthDashError, NotFoundError
from healthdash.models import Category, WorkoutKind
from healthdash.render import plot_csv
from healthdash.storage.accounts import AccountStore
from healthdash.storage.recordstore import RecordStore
from healthdash.storage.reminders import ReminderLog

logger = logging.getLogger(__name__)

CATEGORY_CHOICES = [c.value.lower() for c in Category]

# ---------------- Helper functions -----------------

def parse_timestamp(value: str):
    try:
        return dateparser.parse(value)
    except (ValueError, OverflowError) as e:
        raise argparse.ArgumentTypeError(f"invalid date/time: {value!r}") from e


def read_password(prompt: str = "Password: ") -> str:
    env = os.getenv("HEALTHDASH_PASSWORD")
    if env is not None:
        return env
    return getpass.getpass(prompt)


def format_validation_error(err: ValidationError) -> str:
    parts = []
    for e in err.errors():
        # first loc element is the union tag, not a field
        loc = e["loc"][1:] or e["loc"]
        field = ".".join(str(p) for p in loc)
        parts.append(f"{field}: {e['msg']}" if field else e["msg"])
    return "; ".join(parts)


class Context:
    def __init__(self, settings):
        self.settings = settings
        self.store = RecordStore(settings.data_dir)
        self.accounts = AccountStore(settings.users_file, self.store)
        self.reminders = ReminderLog(settings.reminders_file)

# ---------------- Commands -----------------

def cmd_signup(args, ctx: Context) -> int:
    if ctx.accounts.create(args.user, read_password("New password: ")):
        print(f"✔ signup successful, welcome {args.user}")
        return 0
    print("✘ username already exists or password is empty")
    return 1


def cmd_add(args, ctx: Context) -> int:
    category = Category.parse(args.category)
    fields = {}
    if category is Category.WORKOUT:
        fields = {"workout_kind": args.kind.strip().capitalize(), "duration_minutes": args.minutes}
    elif category is Category.DIET:
        fields = {"food_item": args.food, "quantity_grams": args.grams}
    elif category is Category.HYDRATION:
        fields = {"liters": args.liters}
    elif category is Category.WEIGHT:
        fields = {"kilograms": args.kg}
    elif category is Category.SLEEP:
        fields = {"duration_minutes": args.minutes}
    elif category is Category.STEPS:
        fields = {"count": args.count}
    rec = tracker_domain.add(ctx.store, args.user, category, args.at, **fields)
    print(f"✔ {category.value} record added @ {rec.timestamp}")
    return 0


def cmd_list(args, ctx: Context) -> int:
    category = Category.parse(args.category)
    try:
        rows = list(ctx.store.list_all(args.user, category))
    except NotFoundError:
        rows = []
    if not rows:
        print(f"No {category.value} records found.")
        return 0
    for position, line in rows:
        print(f"{position}: {line}")
    return 0


def cmd_delete(args, ctx: Context) -> int:
    category = Category.parse(args.category)
    if args.all:
        ctx.store.delete_all(args.user, category)
        print(f"✔ all {category.value} records deleted")
        return 0
    removed = ctx.store.delete_at(args.user, category, args.position)
    print(f"✔ record {args.position} deleted: {removed}")
    return 0


def cmd_progress(args, ctx: Context) -> int:
    files = tracker_domain.view_all(ctx.store, args.user)
    if not files:
        print(f"No records found for user {args.user}.")
        return 0
    for category, rows in files.items():
        print(f"\n--- {category.value} ---")
        for position, line in rows:
            print(f"{position}: {line}")
    return 0


def _skip_plot(path, title=None) -> bool:
    return False


def cmd_graph(args, ctx: Context) -> int:
    category = Category.parse(args.category)
    export_dir = ctx.settings.resolved_export_dir()
    if args.no_plot:
        plotter = _skip_plot
    else:
        plotter = partial(plot_csv, gnuplot=ctx.settings.gnuplot)
    result = progress.graph(ctx.store, args.user, category, export_dir, plotter=plotter)
    print(f"✔ {len(result.export.rows)} {category.value} row(s) exported to {result.export.path}")
    if result.plotted:
        print("✔ graph plotted")
    elif not args.no_plot:
        print("✘ graph skipped (gnuplot unavailable or failed)")
    return 0


def cmd_remind(args, ctx: Context) -> int:
    if args.remind_action == "add":
        r = ctx.reminders.add(args.user, " ".join(args.text))
        print(f"✔ reminder set @ {r.timestamp}")
        return 0
    reminders = ctx.reminders.for_user(args.user)
    if not reminders:
        print(f"(No reminders for {args.user})")
        return 0
    for r in reminders:
        print(f"{r.timestamp}  {r.text}")
    return 0

# ---------------- Parser -----------------

def create_parser():
    parser = argparse.ArgumentParser(
        prog="healthdash",
        description="Personal wellness tracker: record, review and chart your daily health data.",
    )
    parser.add_argument("-u", "--user", required=True, help="username")
    parser.add_argument("--data-dir", help="directory holding record files (default: ~/.healthdash)")
    parser.add_argument("--export-dir", help="directory for exported CSV files (default: current directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("signup", help="create a new user")
    p.set_defaults(func=cmd_signup, needs_auth=False)

    p = sub.add_parser("add", help="add a record")
    p.set_defaults(func=cmd_add)
    cats = p.add_subparsers(dest="category", required=True)
    c = cats.add_parser("workout")
    c.add_argument("--kind", default=WorkoutKind.UNKNOWN.value,
                   help="|".join(k.value for k in WorkoutKind))
    c.add_argument("--minutes", required=True)
    c = cats.add_parser("diet")
    c.add_argument("--food", required=True)
    c.add_argument("--grams", required=True)
    c = cats.add_parser("hydration")
    c.add_argument("--liters", required=True)
    c = cats.add_parser("weight")
    c.add_argument("--kg", required=True)
    c = cats.add_parser("sleep")
    c.add_argument("--minutes", required=True)
    c = cats.add_parser("steps")
    c.add_argument("--count", required=True)
    for c in cats.choices.values():
        c.add_argument("--at", type=parse_timestamp, help="record date/time (default: now)")

    p = sub.add_parser("list", help="show records of a category")
    p.add_argument("category", choices=CATEGORY_CHOICES)
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("delete", help="delete one or all records of a category")
    p.add_argument("category", choices=CATEGORY_CHOICES)
    which = p.add_mutually_exclusive_group(required=True)
    which.add_argument("--all", action="store_true")
    which.add_argument("--position", type=int, help="1-based record number as shown by 'list'")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("progress", help="show all records of every category")
    p.set_defaults(func=cmd_progress)

    p = sub.add_parser("graph", help="export sleep or weight to CSV and plot it")
    p.add_argument("category", choices=["sleep", "weight"])
    p.add_argument("--no-plot", action="store_true", help="export only")
    p.set_defaults(func=cmd_graph)

    p = sub.add_parser("remind", help="health reminders")
    actions = p.add_subparsers(dest="remind_action", required=True)
    a = actions.add_parser("add")
    a.add_argument("text", nargs="+")
    actions.add_parser("list")
    p.set_defaults(func=cmd_remind)

    return parser

# ---------------- Main -----------------

def main(argv=None) -> int:
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx = Context(load_settings(args.data_dir, args.export_dir))

    try:
        if getattr(args, "needs_auth", True):
            if not ctx.accounts.authenticate(args.user, read_password()):
                print("✘ Invalid username or password.")
                return 1
        return args.func(args, ctx)
    except ValidationError as e:
        print(f"✘ invalid input: {format_validation_error(e)}")
        return 1
    except HealthDashError as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"✘ {e}")
        return 1
    except ValueError as e:
        print(f"✘ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
