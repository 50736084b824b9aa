"""Console script entry point for excel-primes.

Wraps the click command so that an interrupted or crashed run ends with
status 1 and a one-line message naming the tool on stderr.
"""

import sys
from excel_primes.cli import main


PROG_NAME = "excel-primes"


def run() -> None:
    """Run the excel-primes command."""
    try:
        main(prog_name=PROG_NAME)
    except KeyboardInterrupt:
        print(f"\n{PROG_NAME}: cancelled by user", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"{PROG_NAME}: unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    run()
