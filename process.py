from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple
from structs import (
    Submission, UserSnapshot, ProblemRef, DifficultyCount, AggregatedUserResult,
    WeeklyTagWinner, WeeklyWinner, LeaderboardResult,
)
from utils import to_date_string, target_date, shift_date, day_window
from config import WEEKLY_WINNER_MIN_DAYS

ProblemKey = Tuple[Optional[int], str]

MEDALS = ["🥇", "🥈", "🥉"]
SORT_KEYS = ("solvedToday", "rating")

def first_solves(submissions: Iterable[Submission]) -> Dict[ProblemKey, Submission]:
    # equal timestamps fall back to the lower submission id
    earliest: Dict[ProblemKey, Submission] = {}
    for submission in submissions:
        if not submission.accepted:
            continue
        key = submission.problem.key
        current = earliest.get(key)
        if current is None or (submission.creationTimeSeconds, submission.id) < (current.creationTimeSeconds, current.id):
            earliest[key] = submission
    return earliest

def first_solve_index(solves: Mapping[ProblemKey, Submission]) -> Dict[ProblemKey, str]:
    return {key: to_date_string(s.creationTimeSeconds) for key, s in solves.items()}

def daily_problems(solves: Mapping[ProblemKey, Submission], date: str) -> List[ProblemRef]:
    day_solves = [s for s in solves.values() if to_date_string(s.creationTimeSeconds) == date]
    day_solves.sort(key=lambda s: (s.creationTimeSeconds, s.id))
    return [
        ProblemRef(
            contestId=s.problem.contestId,
            index=s.problem.index,
            name=s.problem.name,
            rating=s.problem.rating,
            tags=list(s.problem.tags),
        )
        for s in day_solves
    ]

def streak(solve_dates: Set[str], date: str) -> int:
    count = 0
    day = date
    while day in solve_dates:
        count += 1
        day = shift_date(day, -1)
    return count

def weekly_stats(solves: Mapping[ProblemKey, Submission], window: Sequence[str]) -> Tuple[Dict[str, int], Dict[str, int]]:
    weekly_solves = {day: 0 for day in window}
    weekly_tags: Dict[str, int] = {}
    for submission in solves.values():
        day = to_date_string(submission.creationTimeSeconds)
        if day not in weekly_solves:
            continue
        weekly_solves[day] += 1
        for tag in set(submission.problem.tags):
            weekly_tags[tag] = weekly_tags.get(tag, 0) + 1
    return weekly_solves, weekly_tags

def difficulty_bucket(rating: Optional[int]) -> Optional[str]:
    if rating is None:
        return None
    if rating < 1200:
        return "easy"
    if rating < 1400:
        return "med1"
    if rating < 1600:
        return "med2"
    return "hard"

def difficulty_count(problems: Iterable[ProblemRef]) -> DifficultyCount:
    counts = DifficultyCount()
    for problem in problems:
        bucket = difficulty_bucket(problem.rating)
        if bucket is not None:
            setattr(counts, bucket, getattr(counts, bucket) + 1)
    return counts

def aggregate_user(snapshot: UserSnapshot, date: str) -> AggregatedUserResult:
    solves = first_solves(snapshot.submissions)
    solve_dates = set(first_solve_index(solves).values())
    today_problems = daily_problems(solves, date)
    weekly_solves, weekly_tags = weekly_stats(solves, day_window(date))

    return AggregatedUserResult(
        handle=snapshot.handle,
        rating=snapshot.rating,
        maxRating=snapshot.maxRating or snapshot.rating,
        rank=snapshot.rank,
        solvedToday=len(today_problems),
        todayProblems=today_problems,
        difficultyCount=difficulty_count(today_problems),
        streak=streak(solve_dates, date),
        weeklySolves=weekly_solves,
        weeklyTagCount=weekly_tags,
    )

def placeholder_result(handle: str, date: str) -> AggregatedUserResult:
    return AggregatedUserResult(
        handle=handle,
        weeklySolves={day: 0 for day in day_window(date)},
    )

def weekly_winner(results: Iterable[AggregatedUserResult], min_days: int = WEEKLY_WINNER_MIN_DAYS) -> Optional[WeeklyWinner]:
    best = None
    for result in results:
        days = result.days_solved
        if days < min_days:
            continue
        if best is None or (days, result.rating) > (best.days_solved, best.rating):
            best = result
    if best is None:
        return None
    return WeeklyWinner(handle=best.handle, daysSolved=best.days_solved)

def weekly_tag_winners(results: Iterable[AggregatedUserResult]) -> Dict[str, WeeklyTagWinner]:
    best: Dict[str, AggregatedUserResult] = {}
    for result in results:
        for tag, count in result.weeklyTagCount.items():
            if count <= 0:
                continue
            current = best.get(tag)
            if current is None or (count, result.rating) > (current.weeklyTagCount[tag], current.rating):
                best[tag] = result
    return {
        tag: WeeklyTagWinner(winner=result.handle, count=result.weeklyTagCount[tag])
        for tag, result in best.items()
    }

def rank_results(results: Iterable[AggregatedUserResult], sort_by: str = "solvedToday") -> List[AggregatedUserResult]:
    if sort_by == "solvedToday":
        # equal solve counts: the lower rated solver ranks higher
        ranked = sorted(results, key=lambda r: (-r.solvedToday, r.rating))
    elif sort_by == "rating":
        ranked = sorted(results, key=lambda r: -r.rating)
    else:
        raise ValueError(f"Unknown sort key {sort_by!r}, expected one of {SORT_KEYS}")

    for i, result in enumerate(ranked):
        result.position = i + 1
        result.medal = MEDALS[i] if i < len(MEDALS) else ""
    return ranked

def build_leaderboard(
    handles: Sequence[str],
    snapshots: Mapping[str, UserSnapshot],
    now: float,
    day_offset: int = 0,
    sort_by: str = "solvedToday",
) -> LeaderboardResult:
    # handles missing from `snapshots` failed to fetch and get a placeholder
    date = target_date(now, day_offset)
    results = []
    failed = []
    for handle in handles:
        snapshot = snapshots.get(handle)
        if snapshot is None:
            failed.append(handle)
            results.append(placeholder_result(handle, date))
        else:
            results.append(aggregate_user(snapshot, date))

    tag_winners = weekly_tag_winners(results)
    winner = weekly_winner(results)

    return LeaderboardResult(
        targetDate=date,
        dayOffset=day_offset,
        result=rank_results(results, sort_by),
        weeklyTagWinners=tag_winners,
        weeklyWinner=winner,
        totalStudents=len(handles),
        fetchedStudents=len(handles) - len(failed),
        failedHandles=failed,
    )

def tag_totals(results: Iterable[AggregatedUserResult]) -> Dict[str, int]:
    totals = defaultdict(int)
    for result in results:
        for tag, count in result.weeklyTagCount.items():
            totals[tag] += count
    return dict(totals)
