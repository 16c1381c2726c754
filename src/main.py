import logging
import sys

from config import EngineConfig
from errors import PaymentsEngineError
from payments_engine import PaymentsEngine
from report import write_accounts

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    try:
        config = EngineConfig.from_env()
    except PaymentsEngineError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(args[0])
    except (PaymentsEngineError, OSError) as e:
        logger.error(f"Failed to process {args[0]}: {e}")
        return 1

    write_accounts(accounts, sys.stdout, config.decimal_places)
    return 0


if __name__ == "__main__":
    sys.exit(main())
