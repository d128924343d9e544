"""
Embedding backlog management CLI.

Usage:
    manage-embeddings status [user_id]
    manage-embeddings generate [user_id] [--nodes id1,id2] [--force]
    manage-embeddings process-queue [--max-nodes 100] [--batch-size 20] [--dry-run]
    manage-embeddings validate [user_id] [--mark-invalid]
    manage-embeddings clear-errors [user_id] [--nodes id1,id2]
    manage-embeddings init-db

Add --target chunks (with --document <id> in place of user_id) to operate
on knowledge chunks instead of graph nodes.

Purpose:
- Inspect the embedding backlog
- Run generation or a queue pass by hand
- Find and reset inconsistent or errored records

Dependencies: knowledge_context.application.services, knowledge_context.boundary.db
System role: Operator entry point for embedding maintenance
"""

import argparse
import asyncio
import logging
import sys
from uuid import UUID

from knowledge_context.application.services import EmbeddingService
from knowledge_context.boundary.db import create_tables, isolated_session
from knowledge_context.configs import get_settings
from knowledge_context.core.document_processing import build_embedding_task
from knowledge_context.core.exceptions import KnowledgePipelineException
from knowledge_context.observability import configure_logging

logger = logging.getLogger(__name__)


def _split_ids(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="manage-embeddings",
        description="Inspect and maintain the embedding backlog",
    )
    parser.add_argument("--target", choices=["nodes", "chunks"], default="nodes")
    parser.add_argument("--document", type=UUID, default=None, help="Document scope for --target chunks")
    subparsers = parser.add_subparsers(dest="command", required=True)

    status = subparsers.add_parser("status", help="Show backlog counts")
    status.add_argument("user_id", nargs="?", type=UUID)

    generate = subparsers.add_parser("generate", help="Generate embeddings")
    generate.add_argument("user_id", nargs="?", type=UUID)
    generate.add_argument("--nodes", default=None, help="Comma-separated record ids")
    generate.add_argument("--force", action="store_true", help="Overwrite existing embeddings")
    generate.add_argument("--batch-size", type=int, default=None)

    queue = subparsers.add_parser("process-queue", help="Embed pending records, oldest first")
    queue.add_argument("--max-nodes", type=int, default=None)
    queue.add_argument("--batch-size", type=int, default=None)
    queue.add_argument("--dry-run", action="store_true", help="Show what would be processed")

    validate = subparsers.add_parser("validate", help="Check stored vectors")
    validate.add_argument("user_id", nargs="?", type=UUID)
    validate.add_argument("--skip-dimensions", action="store_true")
    validate.add_argument("--mark-invalid", action="store_true", help="Flag invalid records as errored")

    clear = subparsers.add_parser("clear-errors", help="Reset errored records to pending")
    clear.add_argument("user_id", nargs="?", type=UUID)
    clear.add_argument("--nodes", default=None, help="Comma-separated record ids")

    subparsers.add_parser("init-db", help="Create the vector extension and tables")

    return parser


def _print_status(status) -> None:
    print("Embedding Queue Status\n")
    print(f"Total: {status.total}")
    rate = (status.with_embedding / status.total * 100) if status.total else 0.0
    print(f"With embeddings: {status.with_embedding} ({rate:.1f}%)")
    print(f"Without embeddings: {status.without_embedding}")
    print(f"With errors: {status.with_errors}")
    print(f"In progress: {status.in_progress}")
    if status.oldest_pending_age_days is not None:
        print(f"Oldest pending: {status.oldest_pending_age_days:.1f} days ago")
    if status.by_type:
        print("\nBy type:")
        for record_type, counts in status.by_type.items():
            completion = (counts.with_embedding / counts.total * 100) if counts.total else 0.0
            print(f"  {record_type}: {counts.with_embedding}/{counts.total} ({completion:.1f}%)")


async def run(args: argparse.Namespace) -> int:
    """
    Execute one command against the database.

    Returns:
        int: Process exit code
    """
    settings = get_settings()
    embedder = build_embedding_task(settings.embedding)
    user_id = getattr(args, "user_id", None)

    async with isolated_session() as session:
        service = EmbeddingService(session, embedder, settings=settings.backlog)

        if args.command == "status":
            status = await service.get_status(args.target, user_id=user_id, document_id=args.document)
            _print_status(status)
            return 0

        if args.command == "generate":
            if args.force:
                print("Force regenerate enabled - existing embeddings will be overwritten")
            result = await service.generate(
                args.target,
                node_ids=_split_ids(args.nodes),
                user_id=user_id,
                document_id=args.document,
                batch_size=args.batch_size,
                force_regenerate=args.force,
            )
            print(result.message)
            for error in result.errors:
                print(f"  {error.id}: {error.error}")
            return 1 if result.errors else 0

        if args.command == "process-queue":
            result = await service.process_queue(
                args.target,
                max_nodes=args.max_nodes,
                batch_size=args.batch_size,
                dry_run=args.dry_run,
            )
            print(result.message)
            stats = result.stats
            print("\nProcessing Statistics:")
            print(f"  Processed: {stats.processed}")
            print(f"  Errors: {stats.errors}")
            print(f"  Users affected: {stats.users_affected}")
            print(f"  Tokens used: {stats.tokens_used}")
            print(f"  Processing time: {stats.elapsed_ms / 1000:.2f}s")
            return 1 if stats.errors else 0

        if args.command == "validate":
            report = await service.validate(
                args.target,
                user_id=user_id,
                document_id=args.document,
                check_dimensions=not args.skip_dimensions,
                mark_invalid=args.mark_invalid,
            )
            print(f"Total checked: {report.total_checked}")
            print(f"Valid embeddings: {report.valid}")
            print(f"Invalid embeddings: {report.invalid}")
            for issue in report.issues:
                print(f"  {issue.issue}: {issue.description}")
            return 1 if report.issues else 0

        if args.command == "clear-errors":
            result = await service.clear_errors(
                args.target,
                user_id=user_id,
                document_id=args.document,
                node_ids=_split_ids(args.nodes),
            )
            print(f"Cleared errors from {result.cleared_count} records")
            return 0

    return 2


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)

    if args.command == "init-db":
        create_tables()
        print("Schema ready")
        sys.exit(0)

    try:
        code = asyncio.run(run(args))
    except KnowledgePipelineException as e:
        logger.error(f"{__name__}:main - {e.message}", extra={"details": e.details})
        print(f"Error: {e.message}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
