import itertools
from datetime import datetime
import pytest
from structs import Problem, Submission, UserSnapshot
from utils import tracker_tz

# 2024-03-10 12:00 in UTC+6
NOW = tracker_tz.localize(datetime(2024, 3, 10, 12, 0)).timestamp()
TODAY = "2024-03-10"

def at(date_str: str, hour: int = 12, minute: int = 0) -> int:
    day = datetime.strptime(date_str, "%Y-%m-%d").replace(hour=hour, minute=minute)
    return int(tracker_tz.localize(day).timestamp())

@pytest.fixture
def now():
    return NOW

@pytest.fixture
def make_submission():
    ids = itertools.count(1)

    def factory(date_str, contest_id=1, index="A", verdict="OK", rating=None, tags=(), hour=12, minute=0, name=None):
        return Submission(
            id=next(ids),
            contestId=contest_id,
            creationTimeSeconds=at(date_str, hour, minute),
            problem=Problem(
                contestId=contest_id,
                index=index,
                name=name or f"Problem {contest_id}{index}",
                rating=rating,
                tags=list(tags),
            ),
            verdict=verdict,
        )
    return factory

@pytest.fixture
def make_snapshot():
    def factory(handle, submissions=(), rating=0, max_rating=0, rank="-"):
        return UserSnapshot(
            handle=handle,
            rating=rating,
            maxRating=max_rating,
            rank=rank,
            submissions=list(submissions),
        )
    return factory

@pytest.fixture
def users_file(tmp_path):
    path = tmp_path / "users.txt"
    path.write_text("Alice Smith,alice\nBob Jones,bob\n\n# comment\ncarol\n", encoding="utf-8")
    return str(path)
