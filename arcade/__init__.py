"""
Arcade Package
==============

Game logic, scoring and evaluation for the Drop Match puzzle.

- drop_core: tick-driven puzzle engine and Gymnasium environment
- evaluation: seed bank and agent evaluation harness

All tunable parameters are in game_config.yaml.
"""
