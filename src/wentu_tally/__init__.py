"""
Ranked-choice tally of date options for group scheduling events.
"""

__version__ = "0.1.0"
