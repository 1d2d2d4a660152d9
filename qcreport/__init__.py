"""Quality-control analysis of discipline work programs against a curriculum."""

__version__ = "1.0.0"
