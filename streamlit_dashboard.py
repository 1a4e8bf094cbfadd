import logging
import streamlit as st
import pandas as pd
import plotly.express as px
from collect import CodeforcesError
from process import tag_totals
from service import TrackerService, LeaderboardUnavailable
from structs import LeaderboardResult
import config

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

# Set page config
st.set_page_config(
    page_title="Codeforces Student Leaderboard",
    page_icon="🏆",
    layout="wide"
)

# Custom CSS to increase heading font sizes
st.markdown("""
<style>
h1 {
    font-size: 2.8rem !important;
    font-weight: 600 !important;
    margin-bottom: 1rem !important;
}
h3 {
    font-size: 1.8rem !important;
    font-weight: 500 !important;
    margin-bottom: 0.6rem !important;
}
h4 {
    font-size: 1.4rem !important;
    font-weight: 500 !important;
    margin-bottom: 0.5rem !important;
}
.sidebar .block-container {
    padding-top: 2rem !important;
}
</style>
""", unsafe_allow_html=True)

RANK_COLORS = {
    "newbie": "#9ca3af",
    "pupil": "#4ade80",
    "specialist": "#22d3ee",
    "expert": "#60a5fa",
    "candidate_master": "#c084fc",
    "master": "#fb923c",
    "international_master": "#f97316",
    "grandmaster": "#f87171",
    "international_grandmaster": "#ef4444",
    "legendary_grandmaster": "#dc2626",
}

DAY_LABELS = {0: "Today", 1: "Yesterday"}

# One service per server process so the TTL cache is shared across sessions
@st.cache_resource
def get_service():
    return TrackerService()

def rank_color(rank: str) -> str:
    color = RANK_COLORS.get(rank.replace(" ", "_").lower(), "")
    return f"color: {color}; font-weight: bold" if color else ""

def leaderboard_frame(board: LeaderboardResult) -> pd.DataFrame:
    rows = []
    for s in board.result:
        rows.append({
            "Pos": f"{s.position} {s.medal}".strip(),
            "Handle": s.handle,
            "Rating": s.rating,
            "Max Rating": s.maxRating,
            "Rank": s.rank,
            "Streak": s.streak,
            "Solved": s.solvedToday,
            "Easy": s.difficultyCount.easy,
            "Med 1200+": s.difficultyCount.med1,
            "Med 1400+": s.difficultyCount.med2,
            "Hard": s.difficultyCount.hard,
            "Problems": "\n".join(
                f"{p.name} ({p.rating if p.rating is not None else '-'}) [{', '.join(p.tags)}]"
                for p in s.todayProblems
            ) or "-",
        })
    return pd.DataFrame(rows)

def weekly_frame(board: LeaderboardResult) -> pd.DataFrame:
    # Long format, oldest day first
    rows = []
    for s in board.result:
        for day, count in reversed(list(s.weeklySolves.items())):
            rows.append({"student": s.handle, "date": day, "count": count})
    return pd.DataFrame(rows)

def render_leaderboard(board: LeaderboardResult, query: str):
    df = leaderboard_frame(board)
    if query:
        df = df[df["Handle"].str.lower().str.contains(query.lower(), regex=False)]
    if df.empty:
        st.info("No students match the search")
        return

    styled = df.style.map(rank_color, subset=["Rank"])
    st.dataframe(
        styled,
        use_container_width=True,
        hide_index=True,
        column_config={
            "Problems": st.column_config.TextColumn("Problems Solved", width="large"),
            "Solved": st.column_config.NumberColumn("Solved", format="%d"),
        }
    )

    with st.expander("Problem links"):
        for s in board.result:
            if s.todayProblems and (not query or query.lower() in s.handle.lower()):
                links = ", ".join(f"[{p.contestId}{p.index} {p.name}]({p.url})" for p in s.todayProblems)
                st.markdown(f"**[{s.handle}](https://codeforces.com/profile/{s.handle})**: {links}")

def render_weekly_chart(board: LeaderboardResult, selected: list):
    activity_df = weekly_frame(board)
    if activity_df.empty:
        st.info("No activity data available")
        return
    if selected:
        activity_df = activity_df[activity_df["student"].isin(selected)]

    activity_fig = px.line(
        activity_df,
        x="date",
        y="count",
        color="student",
        markers=True,
        title="New Problems Solved per Day"
    )
    activity_fig.update_layout(
        xaxis_title="Date",
        yaxis_title="Problems Solved",
        yaxis=dict(rangemode="tozero", dtick=1),
        title_font=dict(size=18),
        legend_title_font=dict(size=14),
        legend_font=dict(size=12)
    )
    st.plotly_chart(activity_fig, use_container_width=True)

def render_tag_winners(board: LeaderboardResult):
    if not board.weeklyTagWinners:
        st.info("No tagged problems solved this week")
        return
    tags = sorted(board.weeklyTagWinners.items(), key=lambda item: -item[1].count)
    columns = st.columns(3)
    for i, (tag, w) in enumerate(tags):
        with columns[i % 3]:
            st.metric(label=tag, value=w.winner, delta=f"{w.count} solved", delta_color="off")

    totals = tag_totals(board.result)
    tag_df = pd.DataFrame(sorted(totals.items(), key=lambda item: -item[1]), columns=["tag", "count"])
    tag_fig = px.bar(tag_df, x="tag", y="count", title="Problem Tags Solved This Week")
    tag_fig.update_layout(
        xaxis_title="Tag",
        yaxis_title="Count",
        title_font=dict(size=18)
    )
    st.plotly_chart(tag_fig, use_container_width=True)

def render_contests(service: TrackerService):
    col1, col2 = st.columns(2)

    with col1:
        st.markdown("<h3>Upcoming Contests</h3>", unsafe_allow_html=True)
        try:
            contests = service.upcoming()
        except CodeforcesError:
            st.error("Unable to load contests")
            contests = None
        if contests is not None and not contests:
            st.info("No upcoming contests")
        for c in contests or []:
            badge = " 🔥 LIVE" if c.isLive else (" ⏰ Soon" if c.isSoon else "")
            st.markdown(f"[{c.name}]({c.url}){badge}  \n🕒 {c.startTime} | ⏱ {c.duration}")

    with col2:
        st.markdown("<h3>Last 3 Contests Standings</h3>", unsafe_allow_html=True)
        try:
            standings = service.standings()
        except (OSError, CodeforcesError):
            st.error("Unable to load last 3 contests")
            return
        for contest in standings:
            st.markdown(f"<h4>{contest.name}</h4>", unsafe_allow_html=True)
            standings_df = pd.DataFrame([
                {
                    "Pos": i + 1,
                    "Handle": p.handle,
                    "Standing": p.standing if p.participated else "Did not participate",
                    "Rating Change": f"{p.ratingChange:+d}" if p.participated else "—",
                }
                for i, p in enumerate(contest.participants)
            ])
            st.dataframe(standings_df, use_container_width=True, hide_index=True)

def main():
    st.title("Codeforces Student Leaderboard")
    service = get_service()

    # Sidebar
    with st.sidebar:
        st.header("Filters")
        day_offset = st.selectbox(
            "Day:",
            list(range(config.MAX_DAY_OFFSET + 1)),
            format_func=lambda d: DAY_LABELS.get(d, f"{d} days ago")
        )
        sort_by = st.radio(
            "Sort by:",
            ["solvedToday", "rating"],
            format_func=lambda k: "Solved" if k == "solvedToday" else "Rating"
        )
        query = st.text_input("Search handle:").strip()

    try:
        with st.spinner("Loading leaderboard... ⏳"):
            board = service.leaderboard(day_offset=day_offset, sort_by=sort_by)
    except LeaderboardUnavailable:
        st.error("❌ Error fetching data from Codeforces")
        return

    st.markdown(f"<p style='font-size: 1.4rem; margin-top: -0.8rem;'>Problems first solved on {board.targetDate} (UTC+6)</p>", unsafe_allow_html=True)

    if board.weeklyWinner:
        st.success(f"🏆 Weekly Winner: {board.weeklyWinner.handle} ({board.weeklyWinner.daysSolved} days)")
    else:
        st.info("No weekly winner this week")

    if board.failedHandles:
        st.warning(f"Could not fetch {len(board.failedHandles)} of {board.totalStudents} students: {', '.join(board.failedHandles)}")

    st.markdown("<h3>Leaderboard</h3>", unsafe_allow_html=True)
    render_leaderboard(board, query)

    st.markdown("<h3>Weekly Activity</h3>", unsafe_allow_html=True)
    selected = st.multiselect("Show students:", [s.handle for s in board.result])
    render_weekly_chart(board, selected)

    st.markdown("<h3>🏆 Weekly Tag Winners</h3>", unsafe_allow_html=True)
    render_tag_winners(board)

    render_contests(service)

if __name__ == "__main__":
    main()
