"""Fixed rules of the battlefield, team budget and progression scales."""

# Battlefield is GRID_WIDTH columns (x) by GRID_HEIGHT rows (y)
GRID_WIDTH = 8
GRID_HEIGHT = 10

# Maximum summed unit cost of a team
TEAM_BUDGET = 30

MIN_STAGE = 1
MAX_STAGE = 9

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10

# Rows bots deploy on (the enemy half of the grid)
BOT_DEPLOYMENT_ROWS = (8, 9)
