import logging
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from sqlalchemy import func, select, table, update, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import StorageUnavailableError
from app.core.questions import Question, QuestionKind
from app.models.onboarding_responses import OnboardingResponse
from app.models.user import User

logger = logging.getLogger(__name__)


class WritePolicy(str, Enum):
    INSERT = "insert"
    UPSERT = "upsert"


def default_username() -> str:
    return f"user_{int(time.time() * 1000)}"


class OnboardingGateway:
    """
    Reads and writes OnboardingResponse rows.

    Every store failure surfaces as StorageUnavailableError after the
    session has been rolled back; callers never see raw SQLAlchemy errors.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Rollback failed: {e}")

    async def save(
        self,
        *,
        user_id: str,
        username: Optional[str],
        question_set_version: str,
        answers: dict[str, Any],
        formatted_answers: dict[str, str],
        policy: WritePolicy,
        onboarded_user_id: Optional[uuid.UUID] = None,
    ) -> OnboardingResponse:
        try:
            if policy is WritePolicy.UPSERT:
                document = await self._upsert(
                    user_id, username, question_set_version, answers, formatted_answers)
            else:
                document = self._insert(
                    user_id, username, question_set_version, answers, formatted_answers)

            if onboarded_user_id is not None:
                await self.session.execute(
                    update(User)
                    .where(User.id == onboarded_user_id)
                    .values(has_completed_onboarding=True, updated_at=datetime.now())
                )

            await self.session.commit()
            await self.session.refresh(document)
            return document
        except (SQLAlchemyError, OSError) as e:
            await self._rollback()
            raise StorageUnavailableError(f"Failed to save onboarding for {user_id}: {e}") from e

    def _insert(self, user_id, username, question_set_version, answers, formatted_answers) -> OnboardingResponse:
        now = datetime.now()
        document = OnboardingResponse(
            user_id=user_id,
            username=username or default_username(),
            question_set_version=question_set_version,
            answers=answers,
            formatted_answers=formatted_answers,
            created_at=now,
            updated_at=now,
        )
        self.session.add(document)
        return document

    async def _upsert(self, user_id, username, question_set_version, answers, formatted_answers) -> OnboardingResponse:
        stmt = (
            select(OnboardingResponse)
            .where(OnboardingResponse.user_id == user_id)
            .order_by(OnboardingResponse.created_at.desc())
            .limit(1)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        document = result.scalar_one_or_none()
        if document is None:
            return self._insert(user_id, username, question_set_version, answers, formatted_answers)

        if username:
            document.username = username
        document.question_set_version = question_set_version
        document.answers = answers
        document.formatted_answers = formatted_answers
        # Set explicitly: onupdate does not fire when nothing else changed.
        document.updated_at = datetime.now()
        return document

    async def get(self, onboarding_id: uuid.UUID) -> Optional[OnboardingResponse]:
        try:
            return await self.session.get(OnboardingResponse, onboarding_id)
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(f"Failed to load onboarding {onboarding_id}: {e}") from e

    async def list_for_user(self, user_id: str, *, page: int, limit: int) -> tuple[list[OnboardingResponse], int]:
        try:
            stmt = (
                select(OnboardingResponse)
                .where(OnboardingResponse.user_id == user_id)
                .order_by(OnboardingResponse.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            documents = (await self.session.scalars(stmt)).all()
            total = await self.session.scalar(
                select(func.count()).select_from(OnboardingResponse)
                .where(OnboardingResponse.user_id == user_id)
            )
            return list(documents), total or 0
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(f"Failed to list onboardings for {user_id}: {e}") from e

    async def list_recent(self, limit: int) -> list[OnboardingResponse]:
        try:
            stmt = select(OnboardingResponse).order_by(OnboardingResponse.created_at.desc()).limit(limit)
            return list((await self.session.scalars(stmt)).all())
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(f"Failed to list recent onboardings: {e}") from e

    async def count(self, question_set_version: Optional[str] = None) -> int:
        try:
            stmt = select(func.count()).select_from(OnboardingResponse)
            if question_set_version is not None:
                stmt = stmt.where(OnboardingResponse.question_set_version == question_set_version)
            return await self.session.scalar(stmt) or 0
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(f"Failed to count onboardings: {e}") from e

    async def count_by_answer(
        self, question: Question, question_set_version: Optional[str] = None
    ) -> list[tuple[str, int]]:
        """
        Distinct answer values for one choice question with their counts,
        highest count first. Multi-choice answers are unwound so each selected
        option counts once per document. Order among equal counts is not
        guaranteed.

        With question_set_version, only documents validated against that
        version are counted.
        """
        try:
            if question.kind is QuestionKind.MULTIPLE:
                if self.session.get_bind().dialect.name == "postgresql":
                    return await self._count_unwound_in_store(question.key, question_set_version)
                return await self._count_unwound(question.key, question_set_version)
            return await self._count_grouped(question.key, question_set_version)
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(f"Failed to aggregate {question.key}: {e}") from e

    @staticmethod
    def _for_version(stmt, question_set_version: Optional[str]):
        if question_set_version is None:
            return stmt
        return stmt.where(OnboardingResponse.question_set_version == question_set_version)

    async def _count_values(self, answered) -> list[tuple[str, int]]:
        count = func.count().label("count")
        stmt = (
            select(answered.c.value, count)
            .where(answered.c.value.is_not(None))
            .group_by(answered.c.value)
            .order_by(count.desc())
        )
        rows = (await self.session.execute(stmt)).all()
        return [(value, total) for value, total in rows]

    async def _count_grouped(self, key: str, question_set_version: Optional[str]) -> list[tuple[str, int]]:
        answered = self._for_version(
            select(OnboardingResponse.answers[key].as_string().label("value")),
            question_set_version,
        ).subquery()
        return await self._count_values(answered)

    async def _count_unwound_in_store(self, key: str, question_set_version: Optional[str]) -> list[tuple[str, int]]:
        # jsonb_array_elements_text yields one row per selected option.
        answered = self._for_version(
            select(func.jsonb_array_elements_text(OnboardingResponse.answers[key]).label("value"))
            .where(func.jsonb_typeof(OnboardingResponse.answers[key]) == "array"),
            question_set_version,
        ).subquery()
        return await self._count_values(answered)

    async def _count_unwound(self, key: str, question_set_version: Optional[str]) -> list[tuple[str, int]]:
        counts: dict[str, int] = {}
        stmt = self._for_version(select(OnboardingResponse.answers), question_set_version)
        result = await self.session.scalars(stmt)
        for answers in result:
            selection = (answers or {}).get(key) or []
            if isinstance(selection, str):
                selection = [selection]
            for option in selection:
                counts[option] = counts.get(option, 0) + 1
        # sorted() is stable, so ties keep first-seen order.
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)

    async def import_documents(self, documents: list[dict[str, Any]]) -> int:
        """
        Inserts already-canonical documents in one transaction. Each mapping
        carries user_id, username, question_set_version, answers and
        formatted_answers; created_at is kept when present.
        """
        try:
            for fields in documents:
                document = self._insert(
                    fields["user_id"],
                    fields.get("username"),
                    fields["question_set_version"],
                    fields["answers"],
                    fields["formatted_answers"],
                )
                if fields.get("created_at") is not None:
                    document.created_at = document.updated_at = fields["created_at"]
            await self.session.commit()
            return len(documents)
        except (SQLAlchemyError, OSError) as e:
            await self._rollback()
            raise StorageUnavailableError(f"Failed to import {len(documents)} onboardings: {e}") from e

    async def table_counts(self) -> tuple[Optional[str], list[tuple[str, int]]]:
        try:
            connection = await self.session.connection()
            names = await connection.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            counts = []
            for name in names:
                total = await self.session.scalar(select(func.count()).select_from(table(name)))
                counts.append((name, total or 0))
            return connection.engine.url.database, counts
        except (SQLAlchemyError, OSError) as e:
            raise StorageUnavailableError(f"Failed to read database info: {e}") from e
