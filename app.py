"""
NBA Insights Dashboard
Run with: streamlit run app.py

Scoreboard, match simulator with absent players, and player lookup,
all backed by the prediction API (NBA_INSIGHTS_API_URL).
"""

import asyncio
import logging

import aiohttp
import streamlit as st

from nbainsights.api import NBAInsightsClient, Side
from nbainsights.config import Config
from nbainsights.constants import TREND_STATS
from nbainsights.exceptions import NBAInsightsError
from nbainsights.games import find_game, matchup_team_ids
from nbainsights.interactive import MatchSimulator, SimulatorState
from nbainsights.ops import configure_logging
from nbainsights.reporting import tables

logger = logging.getLogger(__name__)

st.set_page_config(page_title="NBA Insights", page_icon="🏀", layout="wide")

CONFIG = Config.from_env()
configure_logging(CONFIG.log_level)


# The client session and controller tasks live on one loop across reruns
def _loop() -> asyncio.AbstractEventLoop:
    if "loop" not in st.session_state:
        st.session_state.loop = asyncio.new_event_loop()
    return st.session_state.loop


def run(coro):
    return _loop().run_until_complete(coro)


def get_client() -> NBAInsightsClient:
    if "client" not in st.session_state:
        st.session_state.client = NBAInsightsClient(CONFIG.api_base_url)
    return st.session_state.client


def get_simulator(home: str, away: str) -> MatchSimulator:
    sim = st.session_state.get("simulator")
    if sim is None:
        sim = MatchSimulator.from_config(get_client(), home, away, CONFIG)
        st.session_state.simulator = sim

    async def _start():
        sim.set_matchup(home, away)
        sim.start()
        await sim.settle()

    run(_start())
    return sim


async def _retry(sim: MatchSimulator, recalculation: bool = False) -> None:
    # Refetches schedule tasks, so they must start on the session loop
    if recalculation:
        sim.retry_recalculation()
    else:
        sim.refetch()
    await sim.settle()


async def _apply_selection(sim: MatchSimulator, side: Side, wanted) -> None:
    current = set(sim.selection.selected(side))
    for player_id in current - set(wanted):
        sim.mark_present(side, player_id)
    for player_id in wanted:
        if player_id not in current:
            sim.mark_absent(side, player_id)


def fetch(coro, fallback=None):
    try:
        return run(coro)
    except (NBAInsightsError, aiohttp.ClientError, OSError, ValueError) as e:
        logger.warning("Dashboard request failed: %s", e)
        st.error(tables.UNAVAILABLE_MESSAGE)
        return fallback


st.title("🏀 NBA Insights")
st.sidebar.header("Settings")
st.sidebar.caption(f"API: {CONFIG.api_base_url}")

tab1, tab2, tab3 = st.tabs(["📅 Games", "🧪 Match Simulator", "📊 Player Lookup"])

# =============================================================================
# GAMES
# =============================================================================

with tab1:
    games = fetch(get_client().get_30h_games(), fallback=[])
    if games:
        st.dataframe(tables.scoreboard_frame(games), hide_index=True, use_container_width=True)
    else:
        st.info(tables.NO_GAMES_MESSAGE)

# =============================================================================
# MATCH SIMULATOR
# =============================================================================

with tab2:
    if not games:
        st.info(tables.NO_GAMES_MESSAGE)
    else:
        labels = {g.game_id: f"{g.away_team} @ {g.home_team}" for g in games}
        game_id = st.selectbox("Game", list(labels), format_func=labels.get)
        game = find_game(games, game_id)
        home, away = matchup_team_ids(game)
        sim = get_simulator(home, away)

        if sim.state is SimulatorState.UNAVAILABLE:
            st.error(tables.UNAVAILABLE_MESSAGE)
            if st.button("Retry"):
                run(_retry(sim))
                st.rerun()
        elif sim.display_snapshot is None:
            st.info(tables.LOADING_MESSAGE)
        else:
            col_home, col_away = st.columns(2)
            for side, col, name in ((Side.HOME, col_home, game.home_team), (Side.AWAY, col_away, game.away_team)):
                with col:
                    roster = sim.roster(side)
                    if not roster:
                        st.caption(tables.NO_PLAYERS_MESSAGE)
                        continue
                    names = {e.player_id: e.name for e in roster}
                    wanted = st.multiselect(
                        f"Absent ({name})",
                        list(names),
                        default=[pid for pid in sim.selection.selected(side) if pid in names],
                        format_func=names.get,
                        key=f"absent-{side.value}-{home}-{away}",
                    )
                    run(_apply_selection(sim, side, wanted))

            if sim.is_recalculating:
                with st.spinner(tables.RECALCULATING_MESSAGE):
                    run(sim.settle())

            snapshot = sim.display_snapshot
            if sim.state is SimulatorState.RECALCULATION_FAILED:
                st.warning(tables.RECALCULATION_FAILED_MESSAGE)
                if st.button("Retry recalculation"):
                    with st.spinner(tables.RECALCULATING_MESSAGE):
                        run(_retry(sim, recalculation=True))
                    st.rerun()
            for side, boost in sim.usage_boosts.items():
                team = game.home_team if side is Side.HOME else game.away_team
                st.success(f"🔥 Usage boost: +{boost:.1f}% ({team})")
            if sim.has_high_blowout_risk:
                st.warning(f"⚠️ {tables.BLOWOUT_WARNING}")

            st.markdown("\n".join(f"- {line}" for line in tables.match_summary(snapshot)))
            st.subheader(game.home_team)
            st.dataframe(
                tables.players_frame(snapshot.home_players, sim.selection.selected(Side.HOME)),
                hide_index=True,
                use_container_width=True,
            )
            st.subheader(game.away_team)
            st.dataframe(
                tables.players_frame(snapshot.away_players, sim.selection.selected(Side.AWAY)),
                hide_index=True,
                use_container_width=True,
            )

# =============================================================================
# PLAYER LOOKUP
# =============================================================================

with tab3:
    query = st.text_input("Search player", placeholder="e.g. Curry")
    if query:
        players = fetch(get_client().search_players(query), fallback=[])
        if not players:
            st.info(tables.NO_PLAYERS_MESSAGE)
        else:
            options = {p.id: p.full_name for p in players}
            player_id = st.selectbox("Player", list(options), format_func=options.get)

            season = fetch(get_client().get_player_season(player_id))
            if season is not None:
                cols = st.columns(5)
                for col, (label, value) in zip(cols, [
                    ("PTS", season.pts), ("REB", season.reb), ("AST", season.ast),
                    ("PRA", season.pra), ("GP", season.gp),
                ]):
                    col.metric(label, f"{value:.1f}" if isinstance(value, float) else value)

            recent = fetch(get_client().get_player_recent(player_id, limit=CONFIG.recent_games_limit), fallback=[])
            if recent:
                st.dataframe(tables.recent_games_frame(recent, limit=CONFIG.recent_games_limit), hide_index=True, use_container_width=True)

            vs_col, trend_col = st.columns(2)
            with vs_col:
                team_code = st.text_input("Vs team", placeholder="LAL").strip().upper()
                if team_code:
                    vs_team = fetch(get_client().get_player_vs_team(player_id, team_code))
                    if vs_team is not None:
                        st.write(tables.render_vs_team(vs_team, team_code))
            with trend_col:
                stat = st.selectbox("Stat", TREND_STATS)
                threshold = st.number_input("Line", min_value=0.0, step=0.5, value=0.0)
                if st.button("Analyze trend") and threshold > 0:
                    trend = fetch(get_client().analyze_trend(player_id, stat, threshold))
                    if trend is not None:
                        st.text(tables.render_trend(trend))
