"""
Imports onboarding documents exported from the old document store.

Accepts a JSON array (``mongoexport --jsonArray``) or one JSON document per
line. Every document is canonicalized, validated against the target question
set and inserted as a new row; documents that fail validation or carry no
user id are skipped and logged.

Usage:
    onboarding-import-legacy export.json
    onboarding-import-legacy export.json --question-set sports-v2 --dry-run
"""
import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.formatting import format_answers
from app.core.legacy import canonicalize_legacy_document
from app.core.questions import QuestionSet, get_question_set
from app.core.validation import AnswerValidationError, validate_answers
from app.db.onboarding_gateway import OnboardingGateway
from app.db.session import SessionLocal, dispose_engine

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    imported: int = 0
    skipped: list[str] = field(default_factory=list)


def read_export(path: Path) -> list[dict[str, Any]]:
    text = path.read_text(encoding="utf-8").strip()
    if text.startswith("["):
        return json.loads(text)
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def _created_at(document: dict[str, Any]) -> Optional[datetime]:
    value = document.get("createdAt")
    if isinstance(value, dict):
        value = value.get("$date")
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _source_id(document: dict[str, Any], position: int) -> str:
    source = document.get("_id")
    if isinstance(source, dict):
        source = source.get("$oid")
    return str(source or f"#{position}")


async def import_legacy_documents(
    session: AsyncSession,
    documents: Iterable[dict[str, Any]],
    question_set: QuestionSet,
    *,
    dry_run: bool = False,
) -> ImportSummary:
    summary = ImportSummary()
    rows = []
    for position, document in enumerate(documents):
        source = _source_id(document, position)
        canonical = canonicalize_legacy_document(document, question_set)
        if not canonical["user_id"]:
            logger.warning(f"Skipping {source}: no user id")
            summary.skipped.append(source)
            continue
        try:
            canonical["answers"] = validate_answers(canonical["answers"], question_set)
        except AnswerValidationError as exc:
            logger.warning(f"Skipping {source}: {exc}")
            summary.skipped.append(source)
            continue
        canonical["formatted_answers"] = format_answers(canonical["answers"], question_set)
        canonical["created_at"] = _created_at(document)
        rows.append(canonical)

    if not dry_run and rows:
        summary.imported = await OnboardingGateway(session).import_documents(rows)
    logger.info(
        f"Legacy import into {question_set.version}: {len(rows)} valid, "
        f"{summary.imported} written, {len(summary.skipped)} skipped"
    )
    return summary


async def _run(path: Path, version: str, dry_run: bool) -> ImportSummary:
    try:
        async with SessionLocal() as session:
            return await import_legacy_documents(
                session, read_export(path), get_question_set(version), dry_run=dry_run)
    finally:
        await dispose_engine()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Import legacy onboarding documents")
    parser.add_argument("export", type=Path, help="JSON array or JSON-lines export file")
    parser.add_argument(
        "--question-set",
        default=settings.QUESTION_SET_VERSION,
        help="Question set the documents were answered against",
    )
    parser.add_argument("--dry-run", action="store_true", help="Validate only, write nothing")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    summary = asyncio.run(_run(args.export, args.question_set, args.dry_run))
    return 1 if summary.skipped else 0


if __name__ == "__main__":
    sys.exit(main())
