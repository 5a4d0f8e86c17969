"""Command line front end: rank applications and interpret smart content."""

import argparse
import logging
import sys
from typing import List, Optional

import setproctitle

from .core.candidate_index import build
from .core.config import APPNAME, LAUNCHER_CONFIG, load_config, path_dirs
from .core.history import HistoryStore
from .core.locale_resolution import resolve_locale
from .core.scorer import Scorer
from .core.search_models import Candidate
from .core.smart_content import ContentKind, SmartContentRouter
from .utils.currency import CurrencyRateCache
from .utils.unit_converter import UnitConverter

logger = logging.getLogger("Main")

CONTENT_MARKERS = {
    ContentKind.EXPRESSION: "=",
    ContentKind.CONVERSION: "=",
    ContentKind.ACTION: ">",
    ContentKind.ERROR: "!",
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=APPNAME, description="Search applications and evaluate smart content."
    )
    parser.add_argument("query", nargs="*", help="search text")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--config", metavar="PATH", help="config file (default ~/.config/lumen.toml)")
    parser.add_argument("--limit", type=int, metavar="N", help="maximum number of results")
    parser.add_argument("--history", action="store_true", help="show the launch history")
    parser.add_argument("--forget", metavar="ID", help="remove an entry from the launch history")
    return parser.parse_args(argv)


def format_candidate(candidate: Candidate) -> str:
    line = candidate.title
    if candidate.match_text:
        line += f" ({candidate.match_text})"
    marker = "*" if candidate.in_history else " "
    return f"{marker} {line}\t{candidate.id}"


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the lumen command."""
    setproctitle.setproctitle(APPNAME)
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    config = load_config(args.config)
    history = HistoryStore(config.history_file, max_size=config.history_entries)

    if args.forget:
        if history.remove(args.forget):
            print(f"Removed {args.forget} from history")
            return 0
        print(f"{args.forget} is not in the history", file=sys.stderr)
        return 1

    locale = resolve_locale(config.locale)
    corpus = build(
        config.get_desktop_dirs(),
        path_dirs(),
        locale=locale,
        show_hidden=config.show_hidden_apps,
    )
    history.prune(entry.id for entry in corpus)
    scorer = Scorer(corpus, history, locale, max_results=args.limit or config.max_results)

    query = " ".join(args.query)
    currency_cache = None
    if args.history or not query.strip():
        candidates = scorer.history_view()
    else:
        currency_cache = CurrencyRateCache(config.currency_cache_file)
        converter = UnitConverter(
            currency_cache,
            default_currency=config.default_currency,
            dynamic_conversions=config.smart_content_dynamic_conversions,
        )
        router = SmartContentRouter(config, converter=converter)
        content = router.interpret(query)
        if content is not None:
            print(f"{CONTENT_MARKERS[content.kind]} {content.title}")
        candidates = scorer.rank(query)

    for candidate in candidates:
        print(format_candidate(candidate))

    if currency_cache is not None:
        # Let a background rate refresh reach the disk cache before exiting
        currency_cache.wait_for_refresh(LAUNCHER_CONFIG["currency"]["fetch_timeout"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
