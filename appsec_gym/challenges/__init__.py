"""Built-in vulnerable-code challenges."""

from appsec_gym.challenges.catalog import get_all_challenges, get_challenge, next_challenge

__all__ = ["get_all_challenges", "get_challenge", "next_challenge"]
