"""Static analytics configuration constants."""

# Team-season analytics.
CHAMPION_BONUS = 40
PLAYOFF_WIN_POINTS = 8
RUN_DIFF_DIVISOR = 5
ELITE_UNIT_RANK = 3
LOSING_SEASON_PENALTY = 10

PEAK_WINDOW_SEASONS = 5
PEAK_TITLE_BONUS = 30

ERA_THRESHOLD = 200
ERA_MAX_DOWN_YEARS = 2
ERA_MIN_HISTORY = 3
ERA_CARD_LIMIT = 10

HALL_OF_SEASONS_LIMIT = 20
PLAQUE_PARTS_LIMIT = 4
IDENTITY_TAG_LIMIT = 3

# (id, label, color) in evaluation priority order.
IDENTITY_TAGS: tuple[tuple[str, str, str], ...] = (
    ("pitching_factory", "Pitching Factory", "#34d399"),
    ("offensive_juggernaut", "Offensive Juggernaut", "#60a5fa"),
    ("dominant", "Dominant", "#f59e0b"),
    ("fortress", "Fortress", "#a78bfa"),
    ("juggernaut", "Juggernaut", "#ef4444"),
    ("powerhouse", "Powerhouse", "#fb923c"),
    ("mvp_factory", "MVP Factory", "#fbbf24"),
    ("champion", "World Champions", "#f472b6"),
    ("prospect_pipeline", "Prospect Pipeline", "#22d3ee"),
)

# Career ingestion and Hall of Fame.
MIN_SEASON_PA = 10
MIN_SEASON_OUTS = 10

HOF_MIN_SEASONS = 5
HOF_MIN_SCORE = 30.0
HOF_INDUCTION_PCT = 75.0
HOF_VOTE_FLOOR = 5.0
HOF_VOTE_CEILING = 100.0
HOF_VOTE_MULTIPLIER = 1.1
HOF_VOTE_NOISE = 15.0
HOF_WAIT_YEARS = 5

# (stat, per-unit weight, category cap)
HOF_PITCHER_WEIGHTS: tuple[tuple[str, float, float], ...] = (
    ("w", 0.12, 25.0),
    ("ka", 0.007, 20.0),
    ("sv", 0.03, 15.0),
    ("ip", 0.005, 15.0),
)
HOF_HITTER_WEIGHTS: tuple[tuple[str, float, float], ...] = (
    ("h", 0.008, 25.0),
    ("hr", 0.04, 20.0),
    ("rbi", 0.006, 10.0),
    ("sb", 0.02, 10.0),
    ("r", 0.005, 10.0),
)
# (upper bound exclusive, bonus); ERA with no outs is treated as 9.00.
HOF_ERA_BANDS: tuple[tuple[float, float], ...] = ((3.0, 15.0), (3.5, 10.0), (4.0, 5.0))
# (lower bound inclusive, bonus)
HOF_AVG_BANDS: tuple[tuple[float, float], ...] = ((0.320, 15.0), (0.300, 10.0), (0.280, 5.0))
HOF_LONGEVITY_WEIGHT = 0.7
HOF_LONGEVITY_CAP = 10.0

# Leaderboards.
LEADER_STATS = ("h", "hr", "rbi", "sb", "r", "avg", "w", "ka", "sv", "era")
LEADER_MIN_AB = 300
LEADER_MIN_OUTS = 100
LEADER_DEFAULT_LIMIT = 25

# (label, attribute, thresholds)
MILESTONE_LADDERS: tuple[tuple[str, str, tuple[int, ...]], ...] = (
    ("Hit", "h", (1000, 2000, 3000)),
    ("HR", "hr", (100, 200, 300, 400, 500, 600)),
    ("K (pitching)", "ka", (1000, 2000, 3000)),
    ("Win", "w", (100, 150, 200, 250, 300)),
    ("Save", "sv", (100, 200, 300, 400, 500)),
)

SEASON_GAMES = 162
RECORD_CHASE_MARGIN = 0.10
