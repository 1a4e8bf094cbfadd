import random
import pytest
from structs import AggregatedUserResult, ProblemRef, DifficultyCount
from process import (
    first_solves, first_solve_index, daily_problems, streak, weekly_stats,
    difficulty_bucket, difficulty_count, aggregate_user, placeholder_result,
    weekly_winner, weekly_tag_winners, rank_results, build_leaderboard, tag_totals,
)
from utils import day_window
from conftest import TODAY

def result(handle, rating=0, solved=0, weekly=None, tags=None):
    return AggregatedUserResult(
        handle=handle,
        rating=rating,
        solvedToday=solved,
        weeklySolves=weekly or {},
        weeklyTagCount=tags or {},
    )

def active_days(n):
    window = day_window(TODAY)
    return {day: (1 if i < n else 0) for i, day in enumerate(window)}

# --- dedup -----------------------------------------------------------------

def test_first_solve_index_is_order_independent(make_submission):
    subs = [
        make_submission("2024-03-08", 100, "B"),
        make_submission("2024-03-05", 100, "B"),
        make_submission("2024-03-09", 100, "B"),
        make_submission("2024-03-04", 100, "B", verdict="WRONG_ANSWER"),
        make_submission("2024-03-07", 200, "A"),
    ]
    expected = {(100, "B"): "2024-03-05", (200, "A"): "2024-03-07"}
    for _ in range(5):
        random.shuffle(subs)
        assert first_solve_index(first_solves(subs)) == expected

def test_first_solve_index_ignores_unaccepted_and_unjudged(make_submission):
    subs = [
        make_submission("2024-03-10", 1, "A", verdict="TIME_LIMIT_EXCEEDED"),
        make_submission("2024-03-10", 1, "B", verdict=None),
    ]
    assert first_solve_index(first_solves(subs)) == {}

def test_same_day_accepts_collapse_to_one_entry(make_submission):
    subs = [
        make_submission(TODAY, 1, "A", hour=15),
        make_submission(TODAY, 1, "A", hour=9),
    ]
    solves = first_solves(subs)
    assert len(solves) == 1
    assert solves[(1, "A")].creationTimeSeconds == subs[1].creationTimeSeconds

def test_problem_key_is_contest_and_index(make_submission):
    subs = [make_submission(TODAY, 1, "A"), make_submission(TODAY, 2, "A"), make_submission(TODAY, 1, "B")]
    assert set(first_solve_index(first_solves(subs))) == {(1, "A"), (2, "A"), (1, "B")}

# --- daily extraction ------------------------------------------------------

def test_daily_problems_only_new_solves_in_solve_order(make_submission):
    subs = [
        make_submission("2024-03-01", 1, "A"),
        make_submission(TODAY, 1, "A", hour=8),      # resubmission of an old solve
        make_submission(TODAY, 2, "C", hour=20, rating=1500, tags=["dp"]),
        make_submission(TODAY, 2, "B", hour=10, rating=1100),
        make_submission(TODAY, 2, "B", hour=11),
    ]
    problems = daily_problems(first_solves(subs), TODAY)
    assert [(p.contestId, p.index) for p in problems] == [(2, "B"), (2, "C")]
    assert problems[1].rating == 1500
    assert problems[1].tags == ["dp"]

def test_problem_ref_url():
    ref = ProblemRef(contestId=1850, index="G", name="x")
    assert ref.url == "https://codeforces.com/problemset/problem/1850/G"

# --- streak ----------------------------------------------------------------

def test_streak_zero_without_accepted_submissions():
    assert streak(set(), TODAY) == 0

def test_streak_counts_back_to_first_gap():
    dates = {"2024-03-10", "2024-03-09", "2024-03-08", "2024-03-06"}
    assert streak(dates, TODAY) == 3

def test_streak_zero_when_target_day_empty():
    assert streak({"2024-03-09", "2024-03-08"}, TODAY) == 0

def test_streak_across_month_boundary():
    dates = {"2024-03-02", "2024-03-01", "2024-02-29"}
    assert streak(dates, "2024-03-02") == 3

def test_streak_ignores_resubmissions(make_submission, make_snapshot):
    subs = [
        make_submission("2024-03-01", 1, "A"),
        make_submission("2024-03-09", 1, "A"),
        make_submission(TODAY, 2, "A"),
    ]
    assert aggregate_user(make_snapshot("u", subs), TODAY).streak == 1

# --- weekly ----------------------------------------------------------------

def test_weekly_solves_has_every_window_day(make_submission):
    window = day_window(TODAY)
    weekly, tags = weekly_stats(first_solves([]), window)
    assert list(weekly) == window
    assert set(weekly.values()) == {0}
    assert tags == {}

def test_weekly_stats_count_only_in_window_first_solves(make_submission):
    subs = [
        make_submission("2024-03-01", 1, "A", tags=["dp"]),
        make_submission("2024-03-08", 1, "A", tags=["dp"]),    # already solved before the window
        make_submission("2024-03-08", 2, "A", tags=["dp", "greedy"]),
        make_submission("2024-03-04", 3, "A", tags=["graphs"]),
        make_submission("2024-03-03", 4, "A", tags=["math"]),  # outside the window
    ]
    weekly, tags = weekly_stats(first_solves(subs), day_window(TODAY))
    assert weekly["2024-03-08"] == 1
    assert weekly["2024-03-04"] == 1
    assert "2024-03-03" not in weekly
    assert sum(weekly.values()) == 2
    assert tags == {"dp": 1, "greedy": 1, "graphs": 1}

def test_problem_counts_once_per_tag(make_submission):
    subs = [make_submission(TODAY, 1, "A", tags=["dp", "dp"])]
    _, tags = weekly_stats(first_solves(subs), day_window(TODAY))
    assert tags == {"dp": 1}

# --- difficulty ------------------------------------------------------------

@pytest.mark.parametrize("rating,bucket", [
    (800, "easy"),
    (1199, "easy"),
    (1200, "med1"),
    (1399, "med1"),
    (1400, "med2"),
    (1599, "med2"),
    (1600, "hard"),
    (3500, "hard"),
    (None, None),
])
def test_difficulty_bucket(rating, bucket):
    assert difficulty_bucket(rating) == bucket

def test_difficulty_count_skips_unrated():
    problems = [
        ProblemRef(index="A", name="a", rating=800),
        ProblemRef(index="B", name="b", rating=1300),
        ProblemRef(index="C", name="c", rating=1300),
        ProblemRef(index="D", name="d"),
        ProblemRef(index="E", name="e", rating=2100),
    ]
    assert difficulty_count(problems) == DifficultyCount(easy=1, med1=2, med2=0, hard=1)

# --- per user --------------------------------------------------------------

def test_aggregate_user(make_submission, make_snapshot):
    subs = [
        make_submission("2024-02-20", 9, "A", rating=800),
        make_submission(TODAY, 9, "A", rating=800),
        make_submission(TODAY, 10, "A", rating=800, tags=["implementation"]),
        make_submission(TODAY, 10, "B", rating=1600, tags=["dp"], hour=13),
        make_submission(TODAY, 10, "C", verdict="WRONG_ANSWER", rating=1900),
        make_submission("2024-03-09", 11, "A", rating=1250, tags=["dp"]),
    ]
    res = aggregate_user(make_snapshot("alice", subs, rating=1450, max_rating=1500, rank="specialist"), TODAY)
    assert res.handle == "alice"
    assert res.rating == 1450
    assert res.maxRating == 1500
    assert res.rank == "specialist"
    assert res.solvedToday == 2
    assert [p.index for p in res.todayProblems] == ["A", "B"]
    assert res.difficultyCount == DifficultyCount(easy=1, hard=1)
    assert res.streak == 2
    assert res.weeklySolves[TODAY] == 2
    assert res.weeklySolves["2024-03-09"] == 1
    assert res.weeklyTagCount == {"implementation": 1, "dp": 2}

def test_aggregate_user_max_rating_falls_back_to_rating(make_snapshot):
    assert aggregate_user(make_snapshot("u", rating=1300), TODAY).maxRating == 1300

def test_placeholder_result_is_all_zero():
    res = placeholder_result("ghost", TODAY)
    assert res.solvedToday == 0
    assert res.todayProblems == []
    assert res.streak == 0
    assert res.difficultyCount == DifficultyCount()
    assert list(res.weeklySolves) == day_window(TODAY)
    assert sum(res.weeklySolves.values()) == 0
    assert res.weeklyTagCount == {}
    assert res.rank == "-"

# --- winners ---------------------------------------------------------------

def test_weekly_winner_rating_breaks_tie():
    results = [
        result("low", rating=1300, weekly=active_days(5)),
        result("high", rating=1400, weekly=active_days(5)),
        result("four", rating=3000, weekly=active_days(4)),
    ]
    winner = weekly_winner(results)
    assert winner.handle == "high"
    assert winner.daysSolved == 5

def test_weekly_winner_prefers_more_days():
    results = [
        result("five", rating=2000, weekly=active_days(5)),
        result("seven", rating=900, weekly=active_days(7)),
    ]
    assert weekly_winner(results).handle == "seven"

def test_weekly_winner_none_when_nobody_qualifies():
    assert weekly_winner([result("four", weekly=active_days(4))]) is None
    assert weekly_winner([]) is None

def test_weekly_winner_full_tie_keeps_first():
    results = [
        result("first", rating=1500, weekly=active_days(6)),
        result("second", rating=1500, weekly=active_days(6)),
    ]
    assert weekly_winner(results).handle == "first"

def test_weekly_tag_winner_rating_breaks_tie():
    results = [
        result("y", rating=1200, tags={"dp": 3}),
        result("x", rating=1700, tags={"dp": 3, "math": 1}),
        result("z", rating=2500, tags={"dp": 2}),
    ]
    winners = weekly_tag_winners(results)
    assert winners["dp"].winner == "x"
    assert winners["dp"].count == 3
    assert winners["math"].winner == "x"

def test_weekly_tag_winner_omits_zero_count_tags():
    winners = weekly_tag_winners([result("a", tags={"dp": 0}), result("b")])
    assert winners == {}

def test_tag_totals():
    results = [result("a", tags={"dp": 2}), result("b", tags={"dp": 1, "math": 4})]
    assert tag_totals(results) == {"dp": 3, "math": 4}

# --- ranking ---------------------------------------------------------------

def test_rank_by_solved_today_rewards_lower_rating():
    results = [
        result("A", solved=3, rating=1500),
        result("B", solved=3, rating=1200),
        result("C", solved=5, rating=900),
    ]
    ranked = rank_results(results, "solvedToday")
    assert [r.handle for r in ranked] == ["C", "B", "A"]
    assert [r.position for r in ranked] == [1, 2, 3]
    assert [r.medal for r in ranked] == ["🥇", "🥈", "🥉"]

def test_rank_by_rating_is_stable():
    results = [
        result("a", rating=1500),
        result("b", rating=1800),
        result("c", rating=1500),
        result("d", rating=1000),
    ]
    ranked = rank_results(results, "rating")
    assert [r.handle for r in ranked] == ["b", "a", "c", "d"]
    assert ranked[3].position == 4
    assert ranked[3].medal == ""

def test_rank_unknown_key():
    with pytest.raises(ValueError):
        rank_results([], "streak")

# --- whole pipeline --------------------------------------------------------

def test_build_leaderboard_with_failed_handle(make_submission, make_snapshot, now):
    days = day_window(TODAY)
    alice_subs = [make_submission(day, 100 + i, "A", tags=["dp"]) for i, day in enumerate(days[:5])]
    snapshots = {
        "alice": make_snapshot("alice", alice_subs, rating=1400),
        "bob": make_snapshot("bob", [make_submission(TODAY, 1, "A", rating=1000)], rating=1100),
    }
    board = build_leaderboard(["alice", "ghost", "bob"], snapshots, now)

    assert board.status == "OK"
    assert board.targetDate == TODAY
    assert board.totalStudents == 3
    assert board.fetchedStudents == 2
    assert board.failedHandles == ["ghost"]
    # alice and bob both solved 1 today; bob is lower rated
    assert [r.handle for r in board.result] == ["bob", "alice", "ghost"]
    assert board.result[2].medal == "🥉"
    assert board.weeklyWinner.handle == "alice"
    assert board.weeklyWinner.daysSolved == 5
    assert board.weeklyTagWinners["dp"].winner == "alice"
    assert board.weeklyTagWinners["dp"].count == 5

def test_build_leaderboard_previous_day(make_submission, make_snapshot, now):
    subs = [make_submission("2024-03-08", 1, "A"), make_submission("2024-03-09", 1, "B")]
    board = build_leaderboard(["u"], {"u": make_snapshot("u", subs)}, now, day_offset=1)
    assert board.targetDate == "2024-03-09"
    assert board.dayOffset == 1
    assert board.result[0].solvedToday == 1
    assert board.result[0].streak == 2
    assert list(board.result[0].weeklySolves) == day_window("2024-03-09")

def test_build_leaderboard_empty(now):
    board = build_leaderboard([], {}, now)
    assert board.result == []
    assert board.weeklyWinner is None
    assert board.weeklyTagWinners == {}
    assert board.totalStudents == 0
