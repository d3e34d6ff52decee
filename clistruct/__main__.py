"""
Run the compiled-in command line: ``python -m clistruct [OPTIONS]``.

On success the parsed record is dumped in its debug layout; help and faults are
handled by the parser (printed to standard output, exit status 0 or 1).
"""
import logging

from .config import parse


def main():
    logging.basicConfig(level=logging.WARNING)
    config = parse()
    # Plain write: the dump is tab-indented and rich would expand the tabs.
    print(config.debug(), end="")


if __name__ == '__main__':
    main()
