"""
questkit - interactive mini-game engine for lessons and quizzes.

Ten configurable assessment games share one result contract so the
lesson/quiz runner can treat them uniformly:

- questkit.games: game registry, state machines, validators, dispatcher
- questkit.config: runtime settings
- questkit.cli: authoring/review command line
"""

__version__ = "1.0.0"
