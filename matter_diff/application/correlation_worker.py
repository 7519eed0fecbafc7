"""
Correlation worker: links a computed diff to the activity entry the backend created for the same write.

The backend materializes activity entries eventually and without any diff descriptor, so the worker
polls the activity log on a fixed schedule, ranks fresh `matter_updated` entries by time proximity
and actor identity, and stores the winner in the diff store. Best-effort: it never raises.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional, Sequence, Tuple

from matter_diff.application.activity_reader import ActivityReader
from matter_diff.application.diff_repository import DiffRepository
from matter_diff.application.exceptions import ApplicationError
from matter_diff.domain.models.activity import (
    ENTITY_UPDATED_ACTION,
    ActivityEntry,
    Candidate,
    DiffEntry,
)
from matter_diff.domain.models.correlation import CorrelationState, validate_transition

logger = logging.getLogger(__name__)

RETRY_DELAYS_MS = (100, 300, 700)
MATCH_WINDOW_MS = 5000
AMBIGUITY_THRESHOLD_MS = 100
ACTOR_MATCH_WEIGHT = 10


@dataclass(frozen=True)
class MatchingPolicy:
    """Scoring weights and thresholds. Fixed per process; injectable for tests."""

    retry_delays_ms: Tuple[int, ...] = RETRY_DELAYS_MS
    match_window_ms: int = MATCH_WINDOW_MS
    ambiguity_threshold_ms: int = AMBIGUITY_THRESHOLD_MS
    actor_match_weight: int = ACTOR_MATCH_WEIGHT


DEFAULT_POLICY = MatchingPolicy()


@dataclass
class CorrelationOutcome:
    """Result of one worker run."""

    state: CorrelationState
    attempts: int = 0
    diff_entry: Optional[DiffEntry] = None
    ambiguous_pairs: List[Tuple[Candidate, Candidate]] = field(default_factory=list)


def score_entry(entry: ActivityEntry, actor_user_id: Optional[str], policy: MatchingPolicy = DEFAULT_POLICY) -> int:
    """Actor match is the primary signal when both sides carry a user id."""
    if actor_user_id and entry.user_id and entry.user_id == actor_user_id:
        return policy.actor_match_weight
    return 0


def rank_candidates(
    entries: Sequence[ActivityEntry],
    now_ms: float,
    actor_user_id: Optional[str],
    policy: MatchingPolicy = DEFAULT_POLICY,
) -> List[Candidate]:
    """
    Candidates among `matter_updated` entries created within the match window of now_ms,
    ordered by ascending time delta, then descending score.
    """
    candidates = []
    for entry in entries:
        if entry.action != ENTITY_UPDATED_ACTION or not entry.id:
            continue
        created_ms = entry.created_at_ms
        if created_ms is None:
            continue
        delta = abs(now_ms - created_ms)
        if delta > policy.match_window_ms:
            continue
        candidates.append(
            Candidate(activity=entry, time_delta_ms=delta, score=score_entry(entry, actor_user_id, policy))
        )
    candidates.sort(key=lambda c: (c.time_delta_ms, -c.score))
    return candidates


def detect_ambiguity(
    candidates: Sequence[Candidate],
    policy: MatchingPolicy = DEFAULT_POLICY,
) -> Optional[Tuple[Candidate, Candidate]]:
    """Top two candidates when their time deltas are within the ambiguity threshold. Scores are not compared."""
    if len(candidates) < 2:
        return None
    first, second = candidates[0], candidates[1]
    if abs(first.time_delta_ms - second.time_delta_ms) <= policy.ambiguity_threshold_ms:
        return first, second
    return None


def _now_ms() -> float:
    return time.time() * 1000


async def _sleep_ms(delay_ms: float) -> None:
    await asyncio.sleep(delay_ms / 1000)


class CorrelationWorker:
    """
    One instance may serve many runs; runs share no state. Concurrent runs for the same matter
    search the same activity list independently.
    """

    def __init__(
        self,
        activity_reader: ActivityReader,
        diff_repository: DiffRepository,
        policy: MatchingPolicy = DEFAULT_POLICY,
        clock: Callable[[], float] = _now_ms,
        sleep: Callable[[float], Awaitable[None]] = _sleep_ms,
    ) -> None:
        self._reader = activity_reader
        self._repository = diff_repository
        self._policy = policy
        self._clock = clock
        self._sleep = sleep

    async def _poll_once(
        self,
        practice_id: str,
        matter_id: str,
        actor_user_id: Optional[str],
        headers: Mapping[str, str],
        attempt: int,
    ) -> List[Candidate]:
        try:
            entries = await self._reader.fetch_activity_list(practice_id, matter_id, headers)
        except ApplicationError as e:
            logger.warning(
                "activity_fetch_failed",
                extra={"matter_id": matter_id, "attempt": attempt, "error": e.message},
            )
            return []
        except Exception:
            logger.exception("activity_parse_failed", extra={"matter_id": matter_id, "attempt": attempt})
            return []
        return rank_candidates(entries, self._clock(), actor_user_id, self._policy)

    async def run(
        self,
        practice_id: str,
        matter_id: str,
        fields: Sequence[str],
        actor_user_id: Optional[str],
        headers: Mapping[str, str],
    ) -> CorrelationOutcome:
        """Poll, match and store. Returns the terminal outcome; failures end up in logs only."""
        outcome = CorrelationOutcome(state=CorrelationState.POLLING)
        fields = list(fields)
        candidate: Optional[Candidate] = None
        delays = self._policy.retry_delays_ms

        for attempt in range(len(delays) + 1):
            outcome.attempts = attempt + 1
            candidates = await self._poll_once(practice_id, matter_id, actor_user_id, headers, attempt + 1)

            pair = detect_ambiguity(candidates, self._policy)
            if pair is not None:
                outcome.ambiguous_pairs.append(pair)
                logger.warning(
                    "ambiguous_match",
                    extra={
                        "matter_id": matter_id,
                        "candidate_1": {"id": pair[0].activity.id, "delta_ms": pair[0].time_delta_ms, "score": pair[0].score},
                        "candidate_2": {"id": pair[1].activity.id, "delta_ms": pair[1].time_delta_ms, "score": pair[1].score},
                    },
                )

            if candidates:
                candidate = candidates[0]
                break

            if attempt < len(delays):
                logger.info(
                    "activity_not_found_retrying",
                    extra={"matter_id": matter_id, "attempt": attempt + 1, "delay_ms": delays[attempt]},
                )
                await self._sleep(delays[attempt])

        if candidate is None:
            self._transition(outcome, CorrelationState.EXHAUSTED)
            logger.warning(
                "correlation_exhausted",
                extra={"matter_id": matter_id, "fields": fields, "attempts": outcome.attempts},
            )
            return outcome

        self._transition(outcome, CorrelationState.MATCHED)
        entry = DiffEntry(
            activity_id=candidate.activity.id,
            matter_id=matter_id,
            fields=fields,
            user_id=actor_user_id,
            created_at=candidate.activity.created_at,
        )
        outcome.diff_entry = entry

        try:
            await self._repository.append(matter_id, [entry])
        except ApplicationError as e:
            self._transition(outcome, CorrelationState.STORE_FAILED)
            logger.error(
                "diff_store_failed",
                extra={"matter_id": matter_id, "activity_id": entry.activity_id, "error": e.message},
            )
            return outcome

        self._transition(outcome, CorrelationState.STORED)
        logger.info(
            "diff_stored",
            extra={
                "matter_id": matter_id,
                "activity_id": entry.activity_id,
                "fields": fields,
                "delta_ms": candidate.time_delta_ms,
                "score": candidate.score,
            },
        )
        return outcome

    @staticmethod
    def _transition(outcome: CorrelationOutcome, new_state: CorrelationState) -> None:
        validate_transition(outcome.state, new_state)
        outcome.state = new_state
