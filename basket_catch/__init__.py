"""
Basket Catch
============

Arcade minigame: a player-controlled basket catches falling items
(beneficial, harmful, explosive, healing) to build a score while avoiding
a limited number of strikes.

- core: the real-time game loop (spawning, integration, collisions,
  difficulty, pause/resume/immunity state machine)
- highscores: the top-10 leaderboard service and its client

All tunable parameters are in game_config.yaml.
"""
