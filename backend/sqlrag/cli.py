from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .core.config import DEFAULT_PROMPT, get_settings
from .core.exceptions import PipelineError
from .pipeline import RagPipeline

logger = logging.getLogger("sqlrag")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ask a PostgreSQL database a question in plain language",
    )
    parser.add_argument("-user", default=None, help="database user name (default: DB_USER or llama)")
    parser.add_argument("-password", default=None, help="database password (default: DB_PASSWORD or llama)")
    parser.add_argument("-dbname", default=None, help="database name (default: DB_NAME or memory_agent)")
    parser.add_argument("-host", default=None, help="database host (default: DB_HOST or localhost)")
    parser.add_argument("-prompt", default=DEFAULT_PROMPT, help="user's request")
    parser.add_argument("-metadata", default=None, help="path to the extra metadata JSON file")
    parser.add_argument("-model", default=None, help="model identifier (default: OPENAI_MODEL or gpt-4o)")
    parser.add_argument("-timeout", type=float, default=None, help="total time budget in seconds")
    parser.add_argument("-retries", type=int, default=None, help="attempts per model call")
    parser.add_argument("-verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = get_settings(
        user=args.user,
        password=args.password,
        dbname=args.dbname,
        host=args.host,
        extra_metadata_path=args.metadata,
        openai_model=args.model,
        llm_max_attempts=args.retries,
    )
    pipeline = RagPipeline(settings)

    try:
        result = pipeline.run(args.prompt, timeout=args.timeout)
    except PipelineError as exc:
        logger.error(f"Fatal: {exc}")
        return 1
    finally:
        pipeline.client.close()

    print(result.result_text)
    print()
    print(result.explanation)
    return 0


if __name__ == "__main__":
    sys.exit(main())
