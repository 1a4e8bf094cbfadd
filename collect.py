import logging
import time
from typing import Callable, Dict, List, Sequence, Tuple
import requests
from pydantic import ValidationError
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed
from structs import Submission, UserInfo, UserSnapshot, RatingChange, Contest
from utils import dict_to_model
import config

logger = logging.getLogger(__name__)

class CodeforcesError(RuntimeError):
    pass

def api_call(method: str, **params):
    url = f"{config.API_BASE}/{method}"
    try:
        response = requests.get(url, params=params, timeout=config.REQUEST_TIMEOUT)
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise CodeforcesError(f"{method} request failed: {e}") from e

    if data.get("status") != "OK":
        raise CodeforcesError(f"{method} API error: {data.get('comment', data)}")
    return data["result"]

def parse_models(model_cls, rows, method: str) -> list:
    try:
        return [dict_to_model(model_cls, row) for row in rows]
    except (ValidationError, TypeError, AttributeError) as e:
        raise CodeforcesError(f"{method} returned a malformed {model_cls.__name__}: {e}") from e

def fetch_user_info(handle: str) -> UserInfo:
    result = api_call("user.info", handles=handle)
    if not result:
        raise CodeforcesError(f"No user info returned for {handle}")
    info = parse_models(UserInfo, result[:1], "user.info")[0]
    if not info.maxRating:
        info.maxRating = info.rating
    return info

def fetch_submissions(handle: str, count: int = None) -> List[Submission]:
    result = api_call("user.status", handle=handle, count=count or config.SUBMISSION_COUNT)
    submissions = parse_models(Submission, result, "user.status")
    logger.info(f"Found {len(submissions)} submissions for {handle}")
    return submissions

def fetch_user_rating(handle: str) -> List[RatingChange]:
    result = api_call("user.rating", handle=handle)
    logger.info(f"Found {len(result)} rating change stats for {handle}")
    return parse_models(RatingChange, result, "user.rating")

def fetch_contests() -> List[Contest]:
    result = api_call("contest.list", gym="false")
    logger.info(f"Found {len(result)} contests")
    return parse_models(Contest, result, "contest.list")

def with_retry(fn: Callable, *args, attempts: int = None, delay: float = None, sleep: Callable = time.sleep):
    retrying = Retrying(
        stop=stop_after_attempt(attempts or config.RETRY_ATTEMPTS),
        wait=wait_fixed(config.RETRY_DELAY if delay is None else delay),
        retry=retry_if_exception_type(CodeforcesError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    return retrying(fn, *args)

def fetch_snapshot(handle: str, sleep: Callable = time.sleep) -> UserSnapshot:
    info = with_retry(fetch_user_info, handle, sleep=sleep)
    submissions = with_retry(fetch_submissions, handle, sleep=sleep)
    return UserSnapshot(
        handle=info.handle,
        rating=info.rating,
        maxRating=info.maxRating,
        rank=info.rank,
        submissions=submissions,
    )

def collect_all(handles: Sequence[str], sleep: Callable = time.sleep) -> Tuple[Dict[str, UserSnapshot], List[str]]:
    snapshots = {}
    failed = []
    logger.info(f"Fetching submissions for {len(handles)} handles")
    for i, handle in enumerate(handles):
        if i > 0:
            sleep(config.USER_DELAY)
        try:
            snapshots[handle] = fetch_snapshot(handle, sleep=sleep)
        except CodeforcesError as e:
            logger.warning(f"Giving up on {handle}: {e}")
            failed.append(handle)
    if failed:
        logger.warning(f"Failed to fetch {len(failed)} of {len(handles)} handles: {', '.join(failed)}")
    return snapshots, failed


if __name__ == "__main__":
    import json
    from process import build_leaderboard
    from utils import load_users

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    _, handles = load_users(config.USER_FILE)
    snapshots, failed = collect_all(handles)
    board = build_leaderboard(handles, snapshots, time.time())
    with open("data.json", "w", encoding="utf-8") as f:
        json.dump(board.model_dump(), f, indent=4, ensure_ascii=False)
    print(f"Wrote leaderboard for {board.fetchedStudents}/{board.totalStudents} students to data.json")
