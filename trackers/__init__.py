"""Personal trackers: shipping, shopping and movie watchlists."""

__version__ = "0.1.0"
