"""
phonescan/cli.py
Command-line interface for phonescan.

USAGE:
  phonescan --ingest all
  phonescan --ingest sms --db ./pixel.db
  phonescan --stats
  phonescan --timeline --start 2024-03-01 --end 2024-03-31
  phonescan --correlate
  phonescan --search "prize"
  phonescan --urls
  phonescan --device-name
  phonescan --init-config

Results are printed as JSON on stdout; progress goes to stderr.
Ingestion order for --ingest all is contacts → calls → sms, so SMS
contact names resolve against the fresh contact list.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from phonescan.aggregators.correlation import parse_bound
from phonescan.api import PhonescanAPI
from phonescan.config import load_config, save_config
from phonescan.exceptions import PhonescanError

logger = logging.getLogger(__name__)

GREEN  = '\033[92m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'

INGEST_ORDER = ('contacts', 'calls', 'sms')


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog        = 'phonescan',
        description = 'phonescan - Android SMS / call log ingestion with rule-based risk flags',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
NOTE:
  Risk categories come from fixed keyword and pattern rules.
  They are reproducible, not accurate; review flagged messages by hand.
        """
    )

    parser.add_argument(
        '--ingest', '-i',
        choices = ('sms', 'calls', 'contacts', 'all'),
        help    = 'Pull records from the device and replace the stored set',
    )
    parser.add_argument('--stats',       action='store_true', help='SMS count per address')
    parser.add_argument('--timeline',    action='store_true', help='Daily total / suspicious SMS counts')
    parser.add_argument('--start',       help='Timeline start (ISO date, default from config)')
    parser.add_argument('--end',         help='Timeline end (ISO date covers the whole day, default now)')
    parser.add_argument('--correlate',   action='store_true', help='Call history for busiest SMS addresses')
    parser.add_argument('--search', '-s', metavar='KEYWORD', help='Substring search over stored records')
    parser.add_argument('--urls',        action='store_true', help='SMS containing links')
    parser.add_argument('--device-name', action='store_true', help='Print the sanitized device model')
    parser.add_argument('--init-config', action='store_true',
                        help='Write the effective config to ./phonescan_config.json and exit')
    parser.add_argument(
        '--db',
        type    = Path,
        default = None,
        help    = 'SQLite path (default: <data_dir>/<device>.db)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )

    args = parser.parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level   = log_level,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    try:
        start = parse_bound(args.start) if args.start else None
        end   = parse_bound(args.end, end_of_day=True) if args.end else None
    except ValueError as e:
        _err(f"Invalid date: {e}")
        return 2

    config = load_config()

    if args.init_config:
        path = save_config(config)
        _ok(f"Config written to {path}")
        return 0

    api = PhonescanAPI(db_path=args.db, config=config)

    try:
        if args.device_name:
            _emit({'deviceName': api.device_name()})

        if args.ingest:
            kinds = INGEST_ORDER if args.ingest == 'all' else (args.ingest,)
            for kind in kinds:
                _step(f"Ingesting {kind}...")
                t0 = time.time()
                records = _ingest(api, kind)
                _ok(f"{len(records)} {kind} records stored in {_elapsed(t0)}")
                if kind == 'sms':
                    flagged = sum(1 for r in records if r['is_suspicious'])
                    _ok(f"{flagged} suspicious messages")

        if args.stats:
            _emit(api.sms_stats())
        if args.timeline:
            _emit(api.timeline(start, end))
        if args.correlate:
            _emit(api.data_correlation())
        if args.search:
            _emit(api.search(args.search))
        if args.urls:
            _emit(api.url_analysis())

    except PhonescanError as e:
        logger.error(f"Operation failed: {e}")
        _err(str(e))
        return 1

    return 0


def _ingest(api: PhonescanAPI, kind: str):
    if kind == 'sms':
        return api.ingest_sms()
    if kind == 'calls':
        return api.ingest_call_log()
    return api.ingest_contacts()


# ── PRINT HELPERS ────────────────────────────────────────────

def _emit(data):  print(json.dumps(data, indent=2, ensure_ascii=False))
def _step(msg):   print(f"  {CYAN}→{RESET} {msg}", file=sys.stderr)
def _ok(msg):     print(f"  {GREEN}✓{RESET} {msg}", file=sys.stderr)
def _err(msg):    print(f"{RED}Error: {msg}{RESET}", file=sys.stderr)

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    sys.exit(main())
