"""
Fruit Catcher
=============

Simulation core for a three-lane catching game: items fall, a basket
catches them, and every level-up pauses the run for a perk choice.

- catch_core: session engine, rules, scoring, config, Gymnasium wrapper
- evaluation: seed-bank harness for scripted agents

All tunable parameters are in game_config.yaml.
"""
