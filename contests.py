import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Sequence
from structs import Contest, RatingChange, UpcomingContest, StandingsEntry, ContestStanding
from collect import CodeforcesError, fetch_user_rating
from utils import tracker_tz
import config

logger = logging.getLogger(__name__)

SOON_SECONDS = 24 * 60 * 60

def format_duration(seconds: int) -> str:
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"

def format_start(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=tracker_tz).strftime("%d/%m/%Y, %H:%M:%S")

def upcoming_contests(contests: Sequence[Contest], now: float) -> List[UpcomingContest]:
    upcoming = []
    for contest in contests:
        if contest.phase not in ("BEFORE", "CODING") or contest.startTimeSeconds is None:
            continue
        start = contest.startTimeSeconds
        end = start + contest.durationSeconds
        is_live = start <= now <= end
        upcoming.append(UpcomingContest(
            id=contest.id,
            name=contest.name,
            startTime=format_start(start),
            duration=format_duration(contest.durationSeconds),
            url=f"https://codeforces.com/contests/{contest.id}",
            isLive=is_live,
            isSoon=not is_live and start - now <= SOON_SECONDS,
        ))

    starts = {c.id: c.startTimeSeconds for c in contests}
    upcoming.sort(key=lambda c: (not c.isLive, not c.isSoon, starts[c.id]))
    return upcoming

def last_finished(contests: Sequence[Contest], count: int = config.STANDINGS_CONTEST_COUNT) -> List[Contest]:
    finished = [c for c in contests if c.phase == "FINISHED" and c.startTimeSeconds is not None]
    finished.sort(key=lambda c: c.startTimeSeconds, reverse=True)
    return finished[:count]

def contest_standing(contest: Contest, histories: Dict[str, List[RatingChange]]) -> ContestStanding:
    participants = []
    for handle, history in histories.items():
        change = next((r for r in history if r.contestId == contest.id), None)
        if change is None:
            participants.append(StandingsEntry(handle=handle))
        else:
            participants.append(StandingsEntry(
                handle=handle,
                standing=change.rank,
                ratingChange=change.newRating - change.oldRating,
            ))
    # non-participants go last, keeping their tracked order
    participants.sort(key=lambda p: (not p.participated, p.standing or 0))
    return ContestStanding(contestId=contest.id, name=contest.name, participants=participants)

def last_contest_standings(
    contests: Sequence[Contest],
    handles: Sequence[str],
    fetch_rating: Callable[[str], List[RatingChange]] = fetch_user_rating,
    sleep: Callable = time.sleep,
) -> List[ContestStanding]:
    recent = last_finished(contests)
    histories = {}
    for i, handle in enumerate(handles):
        if i > 0:
            sleep(config.USER_DELAY)
        try:
            histories[handle] = fetch_rating(handle)
        except CodeforcesError as e:
            # counted as not participating
            logger.warning(f"Could not load rating history for {handle}: {e}")
            histories[handle] = []
    return [contest_standing(contest, histories) for contest in recent]
