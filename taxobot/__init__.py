"""taxobot

Weekly Bluesky bot posting photographic plates of mosquito species, with
GBIF links and a rolling history of past posts to avoid repeats.
"""

__version__ = "1.0.0"
