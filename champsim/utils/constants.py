"""
Constants for the championship engine.
"""

# Match shape
ATTEMPTS_PER_ROUND = 6
ROUNDS_PER_MATCH = 12
ATTEMPTS_PER_MATCH = ATTEMPTS_PER_ROUND * ROUNDS_PER_MATCH  # 72

# Roster rules
ROSTER_SIZE = 5
MIN_STAR_TIER = 1
MAX_STAR_TIER = 5
MAX_ROSTER_STARS = 14

# Sides
SIDE_A = 0
SIDE_B = 1
SIDE_NAMES = ["A", "B"]

# Exact ties go to side A
TIE_BREAK_SIDE = SIDE_A

# Dice
ROLL_MIN = 1
ROLL_MAX = 100

# end_value >= this is an offensive success
SCORING_THRESHOLD = 100

# Sports
BASEBALL = "Baseball"
BASKETBALL = "Basketball"
SOCCER = "Soccer"
SPORTS = (BASEBALL, BASKETBALL, SOCCER)

# Sport-vs-sport bonus: (attacker, defender) -> bonus.
# Each sport gets 40 against the sport it beats and 20 against the one it loses to.
MATCHUP_BONUS = {
    (BASEBALL, BASEBALL): 10, (BASEBALL, BASKETBALL): 20, (BASEBALL, SOCCER): 40,
    (BASKETBALL, BASKETBALL): 10, (BASKETBALL, BASEBALL): 40, (BASKETBALL, SOCCER): 20,
    (SOCCER, SOCCER): 10, (SOCCER, BASEBALL): 20, (SOCCER, BASKETBALL): 40,
}

# Offense buckets per sport: (min, max, points, action).
# max=None means unbounded above.
OFFENSE_RANKINGS = {
    BASEBALL: [
        (100, 135, 10, "single"),
        (136, 165, 20, "double"),
        (166, 250, 30, "triple"),
        (251, None, 50, "homerun"),
    ],
    BASKETBALL: [
        (100, 145, 10, "rebound"),
        (146, 225, 15, "basket"),
        (226, None, 30, "three-pointer"),
    ],
    SOCCER: [
        (100, 145, 10, "pass"),
        (146, 285, 25, "assist"),
        (286, None, 65, "goal"),
    ],
}

# Defense buckets per sport: (min, max, action). min=None means unbounded below.
DEFENSE_RANKINGS = {
    BASEBALL: [
        (None, 19, "catch"),
        (20, 39, "block"),
        (40, 59, "intercept"),
        (60, 79, "dive"),
        (80, 99, "leap"),
    ],
    BASKETBALL: [
        (None, 24, "block"),
        (25, 49, "deflection"),
        (50, 74, "save"),
        (75, 99, "interception"),
    ],
    SOCCER: [
        (None, 24, "block"),
        (25, 49, "deflection"),
        (50, 74, "interception"),
        (75, 99, "save"),
    ],
}

# Championship lifecycle
IDLE = "idle"
ACTIVE = "active"
FINISHED = "finished"

# Tick modes
TICK_ATTEMPT = "attempt"
TICK_ROUND = "round"
TICK_MODES = (TICK_ATTEMPT, TICK_ROUND)
