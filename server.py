import logging
from flask import Flask, jsonify, request
from flask_cors import CORS
from collect import CodeforcesError
from service import TrackerService, LeaderboardUnavailable
import config

logger = logging.getLogger(__name__)

def create_app(service: TrackerService = None) -> Flask:
    app = Flask(__name__)
    CORS(app)
    service = service or TrackerService()
    app.config["SERVICE"] = service

    def leaderboard_response(day_offset):
        sort_by = request.args.get("sort", "solvedToday")
        try:
            board = service.leaderboard(day_offset=day_offset, sort_by=sort_by)
        except ValueError as e:
            return jsonify({"status": "FAILED", "comment": str(e)}), 400
        except LeaderboardUnavailable:
            return jsonify({"status": "FAILED", "comment": "Codeforces unavailable"}), 500
        return jsonify(board.model_dump())

    @app.route("/api/students/today")
    def students_today():
        return leaderboard_response(0)

    @app.route("/api/students/day/<int:day_offset>")
    def students_day(day_offset):
        return leaderboard_response(day_offset)

    @app.route("/api/contests/upcoming")
    def contests_upcoming():
        try:
            contests = service.upcoming()
        except CodeforcesError as e:
            logger.error(f"CF Contest Error: {e}")
            return jsonify({"status": "FAILED", "contests": []}), 500
        return jsonify({"status": "OK", "contests": [c.model_dump() for c in contests]})

    @app.route("/api/contests/last-3-standings")
    def contests_last_standings():
        try:
            standings = service.standings()
        except (OSError, CodeforcesError) as e:
            logger.error(f"CF Standings Error: {e}")
            return jsonify({"status": "FAILED", "contests": []}), 500
        return jsonify({"status": "OK", "contests": [s.model_dump() for s in standings]})

    return app

if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    create_app().run(host="0.0.0.0", port=config.PORT)
