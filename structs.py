from pydantic import BaseModel, Field
from typing import List, Dict, Optional

class Problem(BaseModel):
    contestId: Optional[int] = None
    index: str
    name: str
    rating: Optional[int] = None
    tags: List[str] = Field(default_factory=list)

    @property
    def key(self):
        return (self.contestId, self.index)

class Submission(BaseModel):
    id: int = 0
    contestId: Optional[int] = None
    creationTimeSeconds: int
    problem: Problem
    # absent while the submission is queued or under system testing
    verdict: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.verdict == "OK"

class UserInfo(BaseModel):
    handle: str
    rating: int = 0
    maxRating: int = 0
    rank: str = "-"

class UserSnapshot(BaseModel):
    handle: str
    rating: int = 0
    maxRating: int = 0
    rank: str = "-"
    submissions: List[Submission] = Field(default_factory=list)

    model_config = {"frozen": True}

class RatingChange(BaseModel):
    contestId: int
    contestName: str
    rank: int
    oldRating: int
    newRating: int

class Contest(BaseModel):
    id: int
    name: str
    phase: str
    durationSeconds: int = 0
    startTimeSeconds: Optional[int] = None

class ProblemRef(BaseModel):
    contestId: Optional[int] = None
    index: str
    name: str
    rating: Optional[int] = None
    tags: List[str] = Field(default_factory=list)

    @property
    def url(self) -> str:
        return f"https://codeforces.com/problemset/problem/{self.contestId}/{self.index}"

class DifficultyCount(BaseModel):
    easy: int = 0
    med1: int = 0
    med2: int = 0
    hard: int = 0

class AggregatedUserResult(BaseModel):
    handle: str
    rating: int = 0
    maxRating: int = 0
    rank: str = "-"
    solvedToday: int = 0
    todayProblems: List[ProblemRef] = Field(default_factory=list)
    difficultyCount: DifficultyCount = Field(default_factory=DifficultyCount)
    streak: int = 0
    weeklySolves: Dict[str, int] = Field(default_factory=dict)
    weeklyTagCount: Dict[str, int] = Field(default_factory=dict)
    position: int = 0
    medal: str = ""

    @property
    def days_solved(self) -> int:
        return sum(1 for count in self.weeklySolves.values() if count > 0)

class WeeklyTagWinner(BaseModel):
    winner: Optional[str] = None
    count: int = 0

class WeeklyWinner(BaseModel):
    handle: str
    daysSolved: int

class LeaderboardResult(BaseModel):
    status: str = "OK"
    targetDate: str
    dayOffset: int = 0
    result: List[AggregatedUserResult] = Field(default_factory=list)
    weeklyTagWinners: Dict[str, WeeklyTagWinner] = Field(default_factory=dict)
    weeklyWinner: Optional[WeeklyWinner] = None
    totalStudents: int = 0
    fetchedStudents: int = 0
    failedHandles: List[str] = Field(default_factory=list)

class UpcomingContest(BaseModel):
    id: int
    name: str
    startTime: str
    duration: str
    url: str
    isLive: bool
    isSoon: bool

class StandingsEntry(BaseModel):
    handle: str
    standing: Optional[int] = None
    ratingChange: Optional[int] = None

    @property
    def participated(self) -> bool:
        return self.standing is not None

class ContestStanding(BaseModel):
    contestId: int
    name: str
    participants: List[StandingsEntry] = Field(default_factory=list)
