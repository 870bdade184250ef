import logging
import math
import time
import uuid
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Query, Response, status
from app.api.deps import OptionalIdentity, SessionDep
from app.core.config import settings
from app.core.errors import (
    NotFoundException,
    StorageUnavailableError,
    StorageUnavailableException,
    UnauthorizedException,
    ValidationFailedException,
)
from app.core.formatting import format_answers
from app.core.questions import get_active_question_set
from app.core.validation import AnswerValidationError, FieldError, ValidationErrorKind, validate_answers
from app.db.onboarding_gateway import OnboardingGateway, WritePolicy
from app.schemas.onboarding import (
    AnswerCount,
    DatabaseInfo,
    OnboardingDetail,
    OnboardingDocument,
    OnboardingStats,
    OnboardingSubmissionResult,
    QuestionSchema,
    QuestionSetSchema,
    RecentOnboardings,
    TableInfo,
    UserOnboardings,
)
from app.schemas.response import Pagination

logger = logging.getLogger(__name__)

router = APIRouter()

USERNAME_MAX_LENGTH = 255


def _pop_username(payload: Dict[str, Any]) -> Optional[str]:
    username = payload.pop("username", None)
    if username is None:
        return None
    if not isinstance(username, str) or len(username) > USERNAME_MAX_LENGTH:
        raise ValidationFailedException([FieldError(
            "username", ValidationErrorKind.INVALID_TYPE,
            f"username must be text of at most {USERNAME_MAX_LENGTH} characters")])
    return username.strip() or None


@router.post("", response_model=OnboardingSubmissionResult, status_code=status.HTTP_201_CREATED)
async def submit_onboarding(
    session: SessionDep,
    identity: OptionalIdentity,
    response: Response,
    payload: Dict[str, Any] = Body(...),
) -> OnboardingSubmissionResult:
    if identity is None and settings.ONBOARDING_REQUIRE_AUTH:
        raise UnauthorizedException(detail="Authentication required")

    question_set = get_active_question_set()
    raw = dict(payload)
    username = _pop_username(raw)

    try:
        answers = validate_answers(raw, question_set)
    except AnswerValidationError as exc:
        logger.warning(f"Onboarding submission rejected: {exc}")
        raise ValidationFailedException(exc.errors)

    formatted_answers = format_answers(answers, question_set)
    user_id = str(identity.user_id) if identity else str(uuid.uuid4())
    if username is None and identity is not None:
        username = identity.username
    logger.info(f"Onboarding submission for user {user_id} ({question_set.version})")

    gateway = OnboardingGateway(session)
    try:
        document = await gateway.save(
            user_id=user_id,
            username=username,
            question_set_version=question_set.version,
            answers=answers,
            formatted_answers=formatted_answers,
            policy=WritePolicy(settings.ONBOARDING_WRITE_POLICY),
            onboarded_user_id=identity.user_id if identity else None,
        )
    except StorageUnavailableError as e:
        logger.error(f"Failed to save onboarding responses: {e}")
        if not settings.ONBOARDING_DEGRADED_MODE:
            raise StorageUnavailableException(detail="Failed to save onboarding responses")
        response.status_code = status.HTTP_202_ACCEPTED
        return OnboardingSubmissionResult(
            id=f"temp-id-{int(time.time() * 1000)}",
            user_id=user_id,
            persisted=False,
            message="Storage unavailable; submission was not saved",
        )

    logger.info(f"Onboarding saved: {document.id}")
    return OnboardingSubmissionResult(id=str(document.id), user_id=document.user_id)


@router.get("/stats", response_model=OnboardingStats)
async def get_onboarding_stats(
    session: SessionDep,
    question: Optional[str] = Query(None, description="Restrict the report to one question key"),
) -> OnboardingStats:
    question_set = get_active_question_set()
    if question is None:
        targets = question_set.choice_questions
    else:
        target = question_set.get(question)
        if target is None or not target.is_choice:
            raise NotFoundException(detail=f"No choice question {question} in {question_set.version}")
        targets = (target,)

    gateway = OnboardingGateway(session)
    distributions = {}
    for target in targets:
        counts = await gateway.count_by_answer(target, question_set.version)
        distributions[target.key] = [AnswerCount(value=value, count=count) for value, count in counts]

    return OnboardingStats(
        total=await gateway.count(question_set.version),
        question_set_version=question_set.version,
        distributions=distributions,
    )


@router.get("/questions", response_model=QuestionSetSchema)
async def get_questions() -> QuestionSetSchema:
    """
    The active question set, in presentation order, for the onboarding wizard.
    """
    question_set = get_active_question_set()
    return QuestionSetSchema(
        version=question_set.version,
        title=question_set.title,
        questions=[
            QuestionSchema(
                key=q.key,
                title=q.title,
                kind=q.kind.value,
                required=q.required,
                options=list(q.options),
                max_length=None if q.is_choice else q.max_length,
            )
            for q in question_set.questions
        ],
    )


@router.get("/database-info", response_model=DatabaseInfo)
async def get_database_info(session: SessionDep) -> DatabaseInfo:
    database, counts = await OnboardingGateway(session).table_counts()
    logger.info(f"Database info retrieved: {len(counts)} tables found")
    return DatabaseInfo(
        database=database,
        total_tables=len(counts),
        tables=[TableInfo(name=name, count=count) for name, count in counts],
    )


@router.get("/all", response_model=RecentOnboardings)
async def get_all_onboardings(session: SessionDep) -> RecentOnboardings:
    documents = await OnboardingGateway(session).list_recent(settings.ONBOARDING_RECENT_LIMIT)
    logger.info(f"Retrieved {len(documents)} onboarding responses")
    return RecentOnboardings(
        total=len(documents),
        onboardings=[OnboardingDocument.model_validate(d) for d in documents],
    )


@router.get("/user/{user_id}", response_model=UserOnboardings)
async def get_user_onboardings(
    session: SessionDep,
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> UserOnboardings:
    documents, total = await OnboardingGateway(session).list_for_user(user_id, page=page, limit=limit)
    return UserOnboardings(
        onboardings=[OnboardingDocument.model_validate(d) for d in documents],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/{onboarding_id}", response_model=OnboardingDetail)
async def get_onboarding(session: SessionDep, onboarding_id: str) -> OnboardingDetail:
    try:
        key = uuid.UUID(onboarding_id)
    except ValueError:
        raise NotFoundException(detail="Onboarding not found")

    document = await OnboardingGateway(session).get(key)
    if document is None:
        raise NotFoundException(detail="Onboarding not found")
    return OnboardingDetail(onboarding=OnboardingDocument.model_validate(document))
