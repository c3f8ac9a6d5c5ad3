"""
Command-line interface for tessera.
"""

import logging
import os
import sys

from .parser import create_parser

logger = logging.getLogger("tessera")


def main(argv=None):
    """Parse arguments and run the selected command.

    Returns:
        Process exit code
    """
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")

    parser = create_parser()
    args_ns = parser.parse_args(argv)

    if args_ns.debug or os.getenv("TESSERA_DEBUG"):
        logger.setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled.")

    handler = getattr(args_ns, "func", None)
    if handler is None:
        parser.print_help()
        return 1

    return 0 if handler(args_ns) else 1


if __name__ == "__main__":
    sys.exit(main())
