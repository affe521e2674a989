"""
Isotopic Package
================

Falling-block puzzle engine where every block carries a chemical element.
Adjacent elements fuse into heavier ones, unstable isotopes decay over time,
and full rows clear as in classic Tetris. The goal is to synthesize Uranium.

All tunable parameters are in game_config.yaml.
"""
