import logging
import threading
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple
from structs import LeaderboardResult, UpcomingContest, ContestStanding, UserSnapshot
from collect import CodeforcesError, collect_all, fetch_contests, fetch_user_rating
from contests import upcoming_contests, last_contest_standings
from process import build_leaderboard
from utils import load_users
import config

logger = logging.getLogger(__name__)

class LeaderboardUnavailable(RuntimeError):
    pass

class CacheEntry(NamedTuple):
    snapshot: Any
    fetched_at: float

class SnapshotCache:
    """Last fetched value per key, served until `ttl` seconds have passed."""

    def __init__(self, ttl: float = config.CACHE_TTL):
        self.ttl = ttl
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str, now: float) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None or now - entry.fetched_at >= self.ttl:
            return None
        return entry

    def stale(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, key: str, snapshot: Any, now: float) -> CacheEntry:
        entry = CacheEntry(snapshot, now)
        self._entries[key] = entry
        return entry

    def clear(self):
        self._entries.clear()

class FetchBatch(NamedTuple):
    handles: List[str]
    snapshots: Dict[str, UserSnapshot]
    failed: List[str]

class TrackerService:
    """Caches the raw fetch batch; leaderboards are derived from it using the fetch time as `now`."""

    def __init__(
        self,
        user_file: str = config.USER_FILE,
        cache: SnapshotCache = None,
        collector: Callable[[Sequence[str]], Tuple[Dict[str, UserSnapshot], List[str]]] = collect_all,
        contest_fetcher: Callable = fetch_contests,
        rating_fetcher: Callable = fetch_user_rating,
        clock: Callable[[], float] = time.time,
        sleep: Callable = time.sleep,
    ):
        self.user_file = user_file
        self.cache = cache or SnapshotCache()
        self.collector = collector
        self.contest_fetcher = contest_fetcher
        self.rating_fetcher = rating_fetcher
        self.clock = clock
        self.sleep = sleep
        self._lock = threading.Lock()

    def handles(self) -> List[str]:
        _, handles = load_users(self.user_file)
        return handles

    def _fetch_batch(self) -> FetchBatch:
        handles = self.handles()
        snapshots, failed = self.collector(handles)
        if handles and not snapshots:
            raise CodeforcesError(f"All {len(handles)} handles failed to fetch")
        return FetchBatch(handles, snapshots, failed)

    def batch(self, now: float = None) -> CacheEntry:
        now = self.clock() if now is None else now
        entry = self.cache.get("batch", now)
        if entry is not None:
            return entry
        with self._lock:
            entry = self.cache.get("batch", now)
            if entry is not None:
                return entry
            try:
                batch = self._fetch_batch()
            except (OSError, CodeforcesError) as e:
                stale = self.cache.stale("batch")
                if stale is None:
                    logger.error(f"Leaderboard fetch failed with no cache to fall back on: {e}")
                    raise LeaderboardUnavailable("Codeforces unavailable") from e
                logger.error(f"Leaderboard fetch failed, serving cache from {stale.fetched_at:.0f}: {e}")
                return stale
            return self.cache.put("batch", batch, now)

    def leaderboard(self, day_offset: int = 0, sort_by: str = "solvedToday", now: float = None) -> LeaderboardResult:
        if not 0 <= day_offset <= config.MAX_DAY_OFFSET:
            raise ValueError(f"day offset must be between 0 and {config.MAX_DAY_OFFSET}, got {day_offset}")
        entry = self.batch(now)
        batch = entry.snapshot
        return build_leaderboard(batch.handles, batch.snapshots, entry.fetched_at, day_offset, sort_by)

    def _contests(self, now: float):
        entry = self.cache.get("contests", now)
        if entry is None:
            entry = self.cache.put("contests", self.contest_fetcher(), now)
        return entry.snapshot

    def upcoming(self, now: float = None) -> List[UpcomingContest]:
        now = self.clock() if now is None else now
        return upcoming_contests(self._contests(now), now)

    def standings(self, now: float = None) -> List[ContestStanding]:
        now = self.clock() if now is None else now
        entry = self.cache.get("standings", now)
        if entry is None:
            standings = last_contest_standings(self._contests(now), self.handles(), fetch_rating=self.rating_fetcher, sleep=self.sleep)
            entry = self.cache.put("standings", standings, now)
        return entry.snapshot
