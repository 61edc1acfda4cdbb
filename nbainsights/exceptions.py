"""
Custom exceptions for the NBA insights client.

Provides a hierarchy of exceptions so callers can tell a failed API
request apart from a bad configuration.

Usage:
    from nbainsights.exceptions import RequestFailedError

    try:
        games = await client.get_today_games()
    except RequestFailedError as e:
        print(f"{e.endpoint} failed with status {e.status_code}")
"""

from typing import Optional


class NBAInsightsError(Exception):
    """
    Base exception for all NBA insights errors.

    All custom exceptions inherit from this, allowing:
        except NBAInsightsError:
            # Catch any client error
    """
    pass


# =============================================================================
# API ERRORS
# =============================================================================

class RequestFailedError(NBAInsightsError):
    """
    The prediction API answered with a non-success status or a non-JSON body.

    Raised when:
    - The endpoint returns any status outside 2xx
    - A 2xx response body is not valid JSON

    Transport failures (DNS, refused connection) are not wrapped and
    propagate as the underlying aiohttp/OS error.
    """

    def __init__(self, endpoint: str, status_code: Optional[int] = None, url: Optional[str] = None):
        self.endpoint = endpoint
        self.status_code = status_code
        self.url = url
        msg = f"Request failed: {endpoint}"
        if status_code:
            msg += f" (status: {status_code})"
        super().__init__(msg)


# =============================================================================
# LOOKUP ERRORS
# =============================================================================

class UnknownTeamError(NBAInsightsError):
    """Team name or nickname has no known team code."""

    def __init__(self, team_name: str):
        self.team_name = team_name
        super().__init__(f"Unknown team: {team_name}")


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(NBAInsightsError):
    """
    Configuration or setup error.

    Raised when:
    - The API base URL is not an http(s) URL
    - A config file cannot be parsed
    """

    def __init__(self, setting: str, message: str):
        self.setting = setting
        super().__init__(f"Configuration error ({setting}): {message}")
