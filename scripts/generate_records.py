# scripts/generate_records.py
# This file is part of Sightline - Live Console Views
#
# Synthetic console record generator

"""
Generate a randomized console record file for run_console.py.

The log interleaves application messages with network tasks. Every task
is followed by a message attached to it, like the ones NetworkLogger
writes, so the LOGS mode shows fewer messages than ALL.
"""

import argparse
import csv
import io
import random

COLUMNS = [
    "id",
    "kind",
    "created_at",
    "session",
    "level",
    "label",
    "message",
    "task_id",
    "url",
    "host",
    "method",
    "status_code",
    "error_code",
    "duration",
    "request_size",
    "response_size",
    "state",
]

LEVELS = ["trace", "debug", "info", "notice", "warning", "error", "critical"]
LEVEL_WEIGHTS = [5, 20, 40, 10, 12, 10, 3]
LABELS = ["default", "app", "auth", "database", "ui"]
HOSTS = ["api.example.com", "cdn.example.com", "auth.example.com"]
PATHS = ["/v1/items", "/v1/users", "/v1/search", "/static/app.js", "/login"]
METHODS = ["GET", "GET", "GET", "POST", "PUT", "DELETE"]
MESSAGES = [
    "Loaded configuration",
    "Cache miss for key",
    "User signed in",
    "Request timeout while syncing",
    "Database connection pool exhausted",
    "Rendered view",
]


def generate_records(count: int, task_ratio: float = 0.3, seed=None, start: float = 1.7e9) -> str:
    """Generate `count` records as CSV text.

    Args:
        count: Total number of rows, attached messages included
        task_ratio: Probability that the next entry is a network task
        seed: Random seed for reproducible output
        start: Creation time of the first record
    """
    rng = random.Random(seed)
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=COLUMNS, lineterminator="\n")
    writer.writeheader()

    now = start
    session = f"s{rng.randint(1000, 9999)}"
    written = 0
    while written < count:
        now += rng.uniform(0.01, 2.0)

        if count - written >= 2 and rng.random() < task_ratio:
            host = rng.choice(HOSTS)
            method = rng.choice(METHODS)
            url = f"https://{host}{rng.choice(PATHS)}"
            failed = rng.random() < 0.15
            status = rng.choice([400, 404, 500, 503]) if failed else rng.choice([200, 201, 204, 304])
            task_id = f"t{written + 1}"
            writer.writerow(
                {
                    "id": task_id,
                    "kind": "task",
                    "created_at": f"{now:.3f}",
                    "session": session,
                    "url": url,
                    "host": host,
                    "method": method,
                    "status_code": status,
                    "error_code": 0,
                    "duration": f"{rng.uniform(0.02, 3.0):.3f}",
                    "request_size": rng.randint(0, 4096),
                    "response_size": rng.randint(0, 65536),
                    "state": "failure" if failed else "success",
                }
            )
            writer.writerow(
                {
                    "id": f"m{written + 2}",
                    "kind": "log",
                    "created_at": f"{now + 0.001:.3f}",
                    "session": session,
                    "level": "error" if failed else "debug",
                    "label": "network",
                    "message": f"{method} {url} {status}",
                    "task_id": task_id,
                }
            )
            written += 2
        else:
            writer.writerow(
                {
                    "id": f"m{written + 1}",
                    "kind": "log",
                    "created_at": f"{now:.3f}",
                    "session": session,
                    "level": rng.choices(LEVELS, LEVEL_WEIGHTS)[0],
                    "label": rng.choice(LABELS),
                    "message": rng.choice(MESSAGES),
                }
            )
            written += 1

    return out.getvalue()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Generate a randomized console record file."
    )
    parser.add_argument(
        "-s",
        "--size",
        type=int,
        required=True,
        help="Total number of records to generate.",
    )
    parser.add_argument(
        "--task-ratio",
        type=float,
        default=0.3,
        help="Probability that an entry is a network task (default: 0.3).",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output.")
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Path to the output CSV file. If not specified, prints to stdout.",
    )
    args = parser.parse_args()

    if args.size <= 0:
        print("Error: Size must be a positive integer.")
    else:
        data = generate_records(args.size, args.task_ratio, args.seed)
        if args.output:
            try:
                with open(args.output, "w", newline="", encoding="utf-8") as f:
                    f.write(data)
                print(f"{args.size} records successfully written to {args.output}")
            except IOError as e:
                print(f"Error writing to file {args.output}: {e}")
        else:
            print(data, end="")
