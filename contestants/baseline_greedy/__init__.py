"""
Baseline Greedy Agent Package

A one-piece lookahead agent that simulates every rotation and column on a
copy of the grid and plays the placement with the best cascade.
"""

from .agent import DropMatchAgent, create_agent

__all__ = ["DropMatchAgent", "create_agent"]
