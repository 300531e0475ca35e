"""
Command line interface for HybridRAG.

Usage:
    python -m hybridrag search docs/ "how do I reset my password"
    python -m hybridrag tokens "你好世界 hello" --max-tokens 32
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .services.embeddings import EmbeddingTokenizer
from .services.retrieval import HybridRetrievalService
from .shared import Settings, setup_logging


def _print_json(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


async def _search(args: argparse.Namespace, settings: Settings) -> int:
    service = HybridRetrievalService(settings=settings)

    ingested = await service.bulk_ingest_directory(args.directory)
    if ingested == 0:
        print(f"No .txt/.md files ingested from {args.directory}", file=sys.stderr)
        return 1

    result = await service.query(args.user, args.query)
    stats = service.get_stats()

    _print_json({
        'query': args.query,
        'files_ingested': ingested,
        'results': [chunk.model_dump() for chunk in result.results],
        'cached': result.cached,
        'stats': {**stats.model_dump(), 'cache_hit_rate': stats.cache_hit_rate},
        'embedding': service.embedding_provider.get_stats(),
        'timings': service.metrics.get_all_metrics()['timers'],
    })
    return 0


def search_command(args: argparse.Namespace) -> int:
    settings = Settings(**_overrides(args))
    return asyncio.run(_search(args, settings))


def tokens_command(args: argparse.Namespace) -> int:
    settings = Settings(**_overrides(args))
    tokenizer = EmbeddingTokenizer(settings)
    _print_json(tokenizer.debug_tokenize(args.text, args.max_tokens).model_dump())
    return 0


def _overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    if args.model_dir:
        overrides['model_directory'] = args.model_dir
    if getattr(args, 'no_hybrid', False):
        overrides['enable_hybrid'] = False
    if getattr(args, 'top_k', None) is not None:
        overrides['max_retrieve'] = args.top_k
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='hybridrag',
        description='HybridRAG: hybrid semantic/lexical text retrieval'
    )
    parser.add_argument('--model-dir', help='Directory holding model.onnx, tokenizer.json and vocab.txt')
    parser.add_argument('--log-level', default=None, help='Logging level (default from settings)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    search_parser = subparsers.add_parser('search', help='Ingest a directory and run one query')
    search_parser.add_argument('directory', help='Directory with .txt/.md files')
    search_parser.add_argument('query', help='Search query')
    search_parser.add_argument('--user', default='cli', help='User id recorded with the query')
    search_parser.add_argument('--top-k', type=int, default=None, help='Maximum results')
    search_parser.add_argument('--no-hybrid', action='store_true', help='Disable lexical re-ranking')
    search_parser.set_defaults(func=search_command)

    tokens_parser = subparsers.add_parser('tokens', help='Show how a text is tokenized')
    tokens_parser.add_argument('text', help='Text to tokenize')
    tokens_parser.add_argument('--max-tokens', type=int, default=128, help='Token budget')
    tokens_parser.set_defaults(func=tokens_command)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(log_level=args.log_level)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
