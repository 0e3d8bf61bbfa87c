import argparse
from typing import List, Optional

from semantic_index import config
from semantic_index.indexes import INDEX_TYPES
from semantic_index.session import DocumentSearch
from semantic_index.utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semantic_index",
        description="Find the sentences of a PDF closest in meaning to a query.",
    )
    parser.add_argument("pdf", help="Path to the PDF to index")
    parser.add_argument("query", nargs="+", help="Free-text query")
    parser.add_argument("--top-n", type=int, default=config.DEFAULT_TOP_N, help="Number of matches to show")
    parser.add_argument("--index", choices=sorted(INDEX_TYPES), default=config.INDEX_TYPE, help="Index strategy")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None, encoder=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper())

    with DocumentSearch(encoder=encoder, index_type=args.index) as search:
        search.load(args.pdf)
        search.wait()
        results = search.search(" ".join(args.query), top_n=args.top_n)

    if not results:
        print("No matches.")
        return 1
    for rank, result in enumerate(results, start=1):
        span = result.payload
        print(f"{rank}. Page={span.page_number + 1} | Distance={result.distance:.3f}")
        print(f"   Text: {span.text[:100]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
