#!/usr/bin/env python3
# run_console.py
# This file is part of Sightline - Live Console Views
#
# Command-line interface printing a filtered console view of a record file

import sys
import argparse
from pathlib import Path
from typing import List, Optional

from core import ConsoleListViewModel, CriteriaModel, ManualScheduler
from model.criteria import (
    Criteria,
    GroupBy,
    ListOptions,
    MessageSortBy,
    Mode,
    SearchCriteria,
    SortOrder,
    TaskSortBy,
)
from model.record import Level
from predicate import ParseError, compile_query
from store import MemoryRecordStore
from utils.config import ConfigError, ConsoleConfig
from utils.logger import configure_logging, get_logger
from utils.record_reader import RecordFormatError, read_records, validate_record_file


def build_criteria(args: argparse.Namespace) -> Criteria:
    """Build the initial criteria from command line flags.

    Raises:
        ParseError: The --where expression is malformed
        ConfigError: A level name is unknown
    """
    try:
        levels = frozenset(Level.from_name(name) for name in args.level)
    except ValueError as e:
        raise ConfigError(str(e))

    if args.where:
        # Surface syntax errors before the view is built
        compile_query(args.where)

    search = SearchCriteria(
        query=args.where or None,
        levels=levels,
        labels=frozenset(args.label),
        hosts=frozenset(args.host),
    )
    return Criteria(search=search, only_errors=args.only_errors, filter_term=args.filter)


def build_options(args: argparse.Namespace, mode: Mode) -> ListOptions:
    """Build sort and grouping options from command line flags.

    Raises:
        ConfigError: The sort or group key does not apply to the mode
    """
    try:
        group_by = GroupBy(args.group_by)
        if mode is Mode.TASKS:
            sort = TaskSortBy(args.sort)
            return ListOptions(
                task_sort_by=sort, order=SortOrder(args.order), task_group_by=group_by
            )
        sort = MessageSortBy(args.sort)
        return ListOptions(
            message_sort_by=sort, order=SortOrder(args.order), message_group_by=group_by
        )
    except ValueError as e:
        raise ConfigError(f"Invalid sort or grouping for mode {mode}: {e}")


def build_config(args: argparse.Namespace) -> ConsoleConfig:
    """Environment settings with command line overrides.

    Raises:
        ConfigError: A setting is invalid
    """
    config = ConsoleConfig.from_env()
    if args.limit is None:
        return config
    return ConsoleConfig(
        batch_size=args.limit,
        edge_size=config.edge_size,
        criteria_throttle=config.criteria_throttle,
        filter_term_throttle=config.filter_term_throttle,
    )


def print_view(view_model: ConsoleListViewModel) -> None:
    """Print the counts and the visible window, with section headers."""
    entities = view_model.entities
    visible = view_model.visible_entities
    headers = {s.offset: s for s in view_model.sections or []}

    print(
        f"{view_model.mode}: {len(entities)} records "
        f"(messages: {view_model.log_count}, tasks: {view_model.task_count})"
    )
    for index, record in enumerate(visible):
        section = headers.get(index)
        if section is not None:
            print(f"\n== {section.name} ({section.count}) ==")
        print(f"  {record}")

    hidden = len(entities) - len(visible)
    if hidden > 0:
        print(f"  ... {hidden} more")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser for command line interface.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Sightline console view over a record log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_console.py -r records.csv
  python run_console.py -r records.csv --mode tasks --sort duration --group-by host
  python run_console.py -r records.csv --only-errors --filter timeout -v
  python run_console.py -r records.csv --where 'level >= warning & label == network'
  python run_console.py -r records.csv --validate-only

Filter expressions:
  Comparisons FIELD OP VALUE joined with & (and), | (or), ! (not).
  Operators: == != > >= < <= ~ (contains) !~ =~ (regex) ^= (begins with)
        """,
    )

    parser.add_argument(
        "-r", "--records", required=True, type=Path, help="Path to CSV record file"
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=Mode.ALL.value,
        help="Records to list (default: all)",
    )

    parser.add_argument("--filter", default="", help="Free-text filter term")

    parser.add_argument(
        "--only-errors", action="store_true", help="Only error messages and failed tasks"
    )

    parser.add_argument("--where", default="", help="Filter expression")

    parser.add_argument(
        "--level", action="append", default=[], help="Message level to include (repeatable)"
    )

    parser.add_argument(
        "--label", action="append", default=[], help="Message label to include (repeatable)"
    )

    parser.add_argument(
        "--host", action="append", default=[], help="Task host to include (repeatable)"
    )

    parser.add_argument(
        "--sort", default="created_at", help="Sort key (default: created_at)"
    )

    parser.add_argument(
        "--order", choices=["asc", "desc"], default="desc", help="Sort order (default: desc)"
    )

    parser.add_argument(
        "--group-by", default="none", help="Group key, e.g. level, label, host (default: none)"
    )

    parser.add_argument(
        "--limit", type=int, help="Visible window size (default: SIGHTLINE_BATCH_SIZE or 100)"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output (overrides --verbose)"
    )

    parser.add_argument(
        "--validate-only", action="store_true", help="Only validate record file format"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the console front-end.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, debug=args.debug)
    logger = get_logger()

    try:
        config = build_config(args)
        mode = Mode(args.mode)
        criteria = build_criteria(args)
        options = build_options(args, mode)

        logger.info(f"Validating record file: {args.records}")
        count = validate_record_file(str(args.records))

        if args.validate_only:
            logger.info(f"Record validation successful ({count} records). Exiting.")
            return 0

        store = MemoryRecordStore(read_records(str(args.records)))
        scheduler = ManualScheduler()
        criteria_model = CriteriaModel(scheduler, criteria, config)
        view_model = ConsoleListViewModel(
            store,
            scheduler,
            criteria_model=criteria_model,
            mode=mode,
            options=options,
            config=config,
        )
        view_model.set_visible(True)
        scheduler.run_until_idle()

        print_view(view_model)
        view_model.close()
        criteria_model.close()
        return 0

    except RecordFormatError as e:
        logger.error(f"Record file error: {e}")
        return 1

    except ParseError as e:
        logger.error(f"Filter expression error: {e}")
        return 2

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 3

    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        return 4

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        import traceback

        traceback.print_exc()
        return 5


if __name__ == "__main__":
    sys.exit(main())
