import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.models.user import User
from app.db.models.skill import Skill, user_mentor_skills, user_mentee_skills
from app.db.models.mentorship import Mentorship, OPEN_MENTORSHIP_STATUSES
from app.services.skill_index import skill_ids_by_user

logger = logging.getLogger(__name__)

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
MINUTES_PER_DAY = 24 * 60


class MatchRole(str, enum.Enum):
    """Role the seeker plays in the mentorship being looked for."""
    MENTOR = "mentor"
    MENTEE = "mentee"


@dataclass(frozen=True)
class MatchWeights:
    skill: float = 1.0
    location: float = 0.5
    in_person: float = 0.25
    availability: float = 0.5

    def __post_init__(self):
        for name in ("skill", "location", "in_person", "availability"):
            if getattr(self, name) < 0:
                raise ValueError(f"weight '{name}' must be non-negative")

    @classmethod
    def from_settings(cls, config=None) -> "MatchWeights":
        config = config or settings
        return cls(
            skill=config.MATCH_WEIGHT_SKILL,
            location=config.MATCH_WEIGHT_LOCATION,
            in_person=config.MATCH_WEIGHT_IN_PERSON,
            availability=config.MATCH_WEIGHT_AVAILABILITY,
        )


@dataclass
class ScoredCandidate:
    candidate: User
    score: float
    skill_overlap: int
    location_match: int
    in_person_match: int
    availability_conflict: float
    shared_skills: List[str] = field(default_factory=list)


# ---------------------------------------------------------
# AVAILABILITY
# ---------------------------------------------------------
def _to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    total = int(hours) * 60 + int(minutes)
    if not 0 <= total <= MINUTES_PER_DAY or not 0 <= int(minutes) < 60:
        raise ValueError(f"time out of range: {value}")
    return total


def parse_availability(availability: Optional[dict]) -> Dict[str, List[Tuple[int, int]]]:
    """
    Normalises {"mon": [["09:00", "12:00"], ...]} into merged minute intervals per weekday.
    Unknown weekdays and malformed windows are dropped.
    """
    parsed: Dict[str, List[Tuple[int, int]]] = {}
    if not isinstance(availability, dict):
        return parsed

    # "mon" and "monday" fold into the same day, so collect before merging
    collected: Dict[str, List[Tuple[int, int]]] = {}

    for day, windows in availability.items():
        day_key = str(day).strip().lower()[:3]
        if day_key not in WEEKDAYS or not isinstance(windows, (list, tuple)):
            continue

        intervals = collected.setdefault(day_key, [])
        for window in windows:
            try:
                start, end = (_to_minutes(str(part)) for part in window)
            except (TypeError, ValueError):
                logger.warning(f"[Availability] ignoring malformed window {window!r} on {day}")
                continue
            if end > start:
                intervals.append((start, end))

    for day_key, intervals in collected.items():
        merged: List[Tuple[int, int]] = []
        for start, end in sorted(intervals):
            if merged and start <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(merged[-1][1], end))
            else:
                merged.append((start, end))
        if merged:
            parsed[day_key] = merged

    return parsed


def availability_conflict(a: Optional[dict], b: Optional[dict]) -> float:
    """
    0.0 means the smaller schedule fits entirely inside the other, 1.0 means no common time.
    Missing data on either side is treated as fully compatible.
    """
    left, right = parse_availability(a), parse_availability(b)
    total_left = sum(end - start for windows in left.values() for start, end in windows)
    total_right = sum(end - start for windows in right.values() for start, end in windows)
    if not total_left or not total_right:
        return 0.0

    shared = 0
    for day, windows in left.items():
        for start, end in windows:
            for other_start, other_end in right.get(day, []):
                shared += max(0, min(end, other_end) - max(start, other_start))

    conflict = 1.0 - shared / min(total_left, total_right)
    return min(1.0, max(0.0, conflict))


def location_match(a: Optional[str], b: Optional[str]) -> int:
    if not a or not b or not a.strip() or not b.strip():
        return 0
    return int(a.strip().casefold() == b.strip().casefold())


class MatchingEngine:
    """
    Scores opposite-role candidates for a seeker.

    Nothing is cached; every call reads the current profiles, skills and
    open mentorships from the database.
    """

    def score_candidates(
        self,
        db: Session,
        seeker: User,
        role: MatchRole,
        weights: Optional[MatchWeights] = None,
    ) -> Iterator[ScoredCandidate]:
        weights = weights or MatchWeights.from_settings()
        role = MatchRole(role)

        if role is MatchRole.MENTEE:
            wanted_table, offered_table = user_mentee_skills, user_mentor_skills
        else:
            wanted_table, offered_table = user_mentor_skills, user_mentee_skills

        wanted = skill_ids_by_user(db, wanted_table, [seeker.id])[seeker.id]
        if not wanted:
            return

        blocked = self._open_partner_ids(db, seeker.id)

        candidate_ids = select(offered_table.c.user_id).where(offered_table.c.skill_id.in_(wanted))
        query = db.query(User).filter(
            User.id.in_(candidate_ids),
            User.id != seeker.id,
            User.onboarding_completed_at.isnot(None),
        )
        if blocked:
            query = query.filter(User.id.notin_(blocked))
        candidates = query.all()

        offered = skill_ids_by_user(db, offered_table, [c.id for c in candidates])
        slugs = dict(db.execute(select(Skill.id, Skill.slug).where(Skill.id.in_(wanted))).all())

        scored: List[ScoredCandidate] = []
        for candidate in candidates:
            overlap = wanted & offered.get(candidate.id, set())
            # Hard floor: a mentorship needs at least one shared skill
            if not overlap:
                continue

            loc = location_match(seeker.location, candidate.location)
            in_person = int(bool(seeker.in_person) and bool(candidate.in_person))
            conflict = availability_conflict(seeker.availability, candidate.availability)

            score = (
                weights.skill * len(overlap)
                + weights.location * loc
                + weights.in_person * in_person
                - weights.availability * conflict
            )
            scored.append(ScoredCandidate(
                candidate=candidate,
                score=score,
                skill_overlap=len(overlap),
                location_match=loc,
                in_person_match=in_person,
                availability_conflict=conflict,
                shared_skills=sorted(slugs[skill_id] for skill_id in overlap),
            ))

        scored.sort(key=lambda item: (-item.score, item.candidate.id))
        logger.info(f"[Matching] seeker={seeker.id} role={role.value} candidates={len(scored)}")

        yield from scored

    def _open_partner_ids(self, db: Session, user_id: str) -> set:
        """Users already in a PENDING or ACTIVE mentorship with user_id, in either direction."""
        rows = db.execute(
            select(Mentorship.mentor_id, Mentorship.mentee_id).where(
                Mentorship.status.in_(OPEN_MENTORSHIP_STATUSES),
                or_(Mentorship.mentor_id == user_id, Mentorship.mentee_id == user_id),
            )
        ).all()
        return {mentee_id if mentor_id == user_id else mentor_id for mentor_id, mentee_id in rows}


matching_engine = MatchingEngine()
