"""
Baseline Tracker Agent Package

A simple heuristic agent that chases the lowest catchable item and
steers clear of bombs. Serves as a benchmark and example.
"""

from .agent import CatchAgent, create_agent

__all__ = ["CatchAgent", "create_agent"]
