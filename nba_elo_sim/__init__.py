"""Elo ratings, season and postseason simulation for the NBA."""

__all__ = [
    "api",
    "bracket",
    "config",
    "display",
    "elo",
    "game",
    "league",
    "models",
    "pipeline",
    "prompts",
    "series",
    "storage",
]
