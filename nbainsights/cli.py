"""CLI entry points for the NBA insights client."""

from typing import Awaitable, Callable, Optional, Sequence
import argparse
import asyncio
import logging

import aiohttp

from nbainsights.api import NBAInsightsClient, Side
from nbainsights.config import Config
from nbainsights.constants import TREND_STATS
from nbainsights.exceptions import NBAInsightsError
from nbainsights.interactive import MatchPredictionPanel, MatchSimulator, filter_roster
from nbainsights.ops import configure_logging
from nbainsights.reporting import tables

logger = logging.getLogger(__name__)

Command = Callable[[NBAInsightsClient, Config, argparse.Namespace], Awaitable[str]]


def _load_config(config_path: Optional[str], api_url: Optional[str]) -> Config:
    config = Config.load(config_path) if config_path else Config.from_env()
    if api_url:
        config = Config.from_mapping({
            "NBA_INSIGHTS_API_URL": api_url,
            "NBA_INSIGHTS_RECENT_LIMIT": str(config.recent_games_limit),
            "NBA_INSIGHTS_CANCEL_SUPERSEDED": str(config.cancel_superseded),
            "NBA_INSIGHTS_DIAGNOSTICS": str(config.diagnostics_enabled),
            "NBA_INSIGHTS_LOG_LEVEL": config.log_level,
        })
    return config


async def run_games(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    games = await (client.get_30h_games() if args.upcoming else client.get_today_games())
    return tables.render_scoreboard(games)


async def run_search(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    players = await client.search_players(args.query)
    if not players:
        return tables.NO_PLAYERS_MESSAGE
    return "\n".join(f"{p.id}  {p.full_name}" + (f" ({p.team})" if p.team else "") for p in players)


async def run_player(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    season, recent = await asyncio.gather(
        client.get_player_season(args.player_id),
        client.get_player_recent(args.player_id, limit=config.recent_games_limit),
    )
    lines = [
        f"Season: {season.gp} GP, {season.pts:.1f} PTS / {season.reb:.1f} REB / "
        f"{season.ast:.1f} AST / {season.pra:.1f} PRA",
        "",
        tables.recent_games_frame(recent, limit=config.recent_games_limit).to_string(index=False),
    ]
    if args.vs:
        vs_team = await client.get_player_vs_team(args.player_id, args.vs.upper())
        lines.extend(["", tables.render_vs_team(vs_team, args.vs.upper())])
    if args.threshold is not None:
        trend = await client.analyze_trend(args.player_id, args.stat, args.threshold)
        lines.extend(["", tables.render_trend(trend)])
    return "\n".join(lines)


async def run_roster(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    roster = await client.get_team_roster(args.team.upper())
    return tables.render_roster_options(filter_roster(roster, args.search or ""))


async def run_predict(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    panel = MatchPredictionPanel(client, args.home.upper(), args.away.upper())
    panel.home_star_missing = args.home_star_missing
    panel.away_star_missing = args.away_star_missing
    panel.open()
    await panel.settle()
    if panel.error is not None:
        raise panel.error
    return tables.render_match_prediction(panel.prediction, panel.home_team_id, panel.away_team_id)


async def run_simulate(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    sim = MatchSimulator.from_config(
        client,
        args.home.upper(),
        args.away.upper(),
        config,
        load_rosters=args.rosters,
    )
    await sim.load()
    if sim.error is not None:
        raise sim.error

    sections = ["Baseline", tables.render_simulator(sim)]
    requested = [(Side.HOME, pid) for pid in args.home_missing] + [(Side.AWAY, pid) for pid in args.away_missing]
    if requested:
        for side, player_id in requested:
            if not sim.mark_absent(side, player_id):
                sections.append(f"Player {player_id} not found on the {side.value} roster; ignored.")
        await sim.settle()
        sections.extend(["", "With absences", tables.render_simulator(sim)])
    sim.close()
    return "\n".join(sections)


async def run_impact(client: NBAInsightsClient, config: Config, args: argparse.Namespace) -> str:
    impact = await client.get_missing_player_impact(args.team.upper(), args.player_id)
    lines = [f"{impact.player or impact.player_id} out for {impact.team}: {impact.games_without} games without"]
    for stat, value in sorted(impact.team_impact.items()):
        lines.append(f"  {stat}: {value:+.1f}")
    if impact.message:
        lines.append(impact.message)
    return "\n".join(lines)


COMMANDS = {
    "games": run_games,
    "search": run_search,
    "player": run_player,
    "roster": run_roster,
    "predict": run_predict,
    "simulate": run_simulate,
    "impact": run_impact,
}


async def _run(command: Command, config: Config, args: argparse.Namespace) -> str:
    async with NBAInsightsClient(config.api_base_url) as client:
        return await command(client, config, args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="NBA insights dashboard CLI")
    parser.add_argument("--config", dest="config_path", help="Path to .env or JSON config file")
    parser.add_argument("--api-url", dest="api_url", help="Prediction API base URL")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--diagnostics", action="store_true", help="Log selection and query transitions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    games = subparsers.add_parser("games", help="Show today's games")
    games.add_argument("--upcoming", action="store_true", help="Games in the next 30 hours")

    search = subparsers.add_parser("search", help="Search players by name")
    search.add_argument("query")

    player = subparsers.add_parser("player", help="Season, recent form and trends for a player")
    player.add_argument("player_id", type=int)
    player.add_argument("--vs", help="Opponent team code for head-to-head averages")
    player.add_argument("--stat", default="PTS", type=str.upper, choices=TREND_STATS, help="Stat for trend analysis")
    player.add_argument("--threshold", type=float, help="Line for trend analysis")

    roster = subparsers.add_parser("roster", help="List a team roster")
    roster.add_argument("team")
    roster.add_argument("--search", help="Filter players by name")

    predict = subparsers.add_parser("predict", help="Match prediction with star-missing flags")
    predict.add_argument("home")
    predict.add_argument("away")
    predict.add_argument("--home-star-missing", action="store_true")
    predict.add_argument("--away-star-missing", action="store_true")

    simulate = subparsers.add_parser("simulate", help="Recalculate a match with absent players")
    simulate.add_argument("home")
    simulate.add_argument("away")
    simulate.add_argument("--home-missing", type=int, action="append", default=[], metavar="PLAYER_ID")
    simulate.add_argument("--away-missing", type=int, action="append", default=[], metavar="PLAYER_ID")
    simulate.add_argument("--rosters", action="store_true", help="Validate ids against /team/{id}/roster")

    impact = subparsers.add_parser("impact", help="Impact of a missing player on a team")
    impact.add_argument("team")
    impact.add_argument("player_id", type=int)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args.config_path, args.api_url)
    except (NBAInsightsError, FileNotFoundError) as exc:
        parser.error(str(exc))
        return 2
    if args.diagnostics:
        config.diagnostics_enabled = True
    configure_logging("DEBUG" if args.diagnostics else (args.log_level or config.log_level))

    command = COMMANDS.get(args.command)
    if command is None:
        parser.error("Unknown command")
        return 2

    try:
        output = asyncio.run(_run(command, config, args))
    except NBAInsightsError as exc:
        logger.error("%s", exc)
        print(tables.UNAVAILABLE_MESSAGE)
        return 1
    except (aiohttp.ClientError, OSError) as exc:
        logger.error("Could not reach %s: %s", config.api_base_url, exc)
        print(tables.UNAVAILABLE_MESSAGE)
        return 1
    except ValueError as exc:
        logger.error("Malformed response from %s: %s", config.api_base_url, exc)
        print(tables.UNAVAILABLE_MESSAGE)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
