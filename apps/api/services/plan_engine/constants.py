"""
Constants for plan generation.

These are DEFAULTS that can be overridden by config (plan_rules.yaml).
They exist here for type safety and documentation.
"""

from enum import Enum
from typing import Dict, List, Tuple


class RaceDistance(str, Enum):
    """Goal race distances."""
    FIVE_K = "5K"
    TEN_K = "10K"
    HALF_MARATHON = "Half"
    MARATHON = "Marathon"


class ExperienceLevel(str, Enum):
    """Athlete experience classification."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RunningStatus(str, Enum):
    """How much running the athlete can currently do."""
    ACTIVE = "active"
    CROSS_TRAINING_ONLY = "crossTrainingOnly"
    TRANSITIONING = "transitioning"   # Ramping back from cross-training
    BIKE_ONLY = "bikeOnly"            # Stand-up bike replaces running


class PhaseName(str, Enum):
    """Training phases."""
    BASE = "Base"
    BUILD = "Build"
    PEAK = "Peak"
    TAPER = "Taper"


class DayRole(str, Enum):
    """Role a single calendar day plays in the week."""
    REST = "Rest"
    LONG_SESSION = "LongSession"
    HARD_SESSION = "HardSession"
    CROSS_TRAIN_HARD = "CrossTrainHard"
    CROSS_TRAIN_EASY = "CrossTrainEasy"
    EASY_SESSION = "EasySession"
    RACE = "Race"


class WorkoutType(str, Enum):
    """Training intent of a session, independent of modality."""
    REST = "rest"
    EASY = "easy"
    RECOVERY = "recovery"
    LONG = "long"
    TEMPO = "tempo"
    INTERVALS = "intervals"
    HILLS = "hills"
    AEROBIC_POWER = "aerobic_power"
    RACE = "race"


class Equipment(str, Enum):
    """Cross-training equipment, in assignment order."""
    POOL = "pool"                        # Aqua running
    ELLIPTICAL = "elliptical"
    STATIONARY_BIKE = "stationary_bike"
    SWIMMING = "swimming"
    ROWING = "rowing"
    STAND_UP_BIKE = "stand_up_bike"      # ElliptiGO / Cyclete


DAY_NAMES: List[str] = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]

RUNNING_ROLES = {DayRole.LONG_SESSION, DayRole.HARD_SESSION, DayRole.EASY_SESSION, DayRole.RACE}
CROSS_TRAINING_ROLES = {DayRole.CROSS_TRAIN_HARD, DayRole.CROSS_TRAIN_EASY}


# ============ Race parameters ============

# Canonical race distances (miles)
RACE_DISTANCE_MILES: Dict[RaceDistance, float] = {
    RaceDistance.FIVE_K: 3.1,
    RaceDistance.TEN_K: 6.2,
    RaceDistance.HALF_MARATHON: 13.1,
    RaceDistance.MARATHON: 26.2,
}

RACE_DISPLAY_NAMES: Dict[RaceDistance, str] = {
    RaceDistance.FIVE_K: "5K",
    RaceDistance.TEN_K: "10K",
    RaceDistance.HALF_MARATHON: "Half Marathon",
    RaceDistance.MARATHON: "Marathon",
}

# Accepted spellings for incoming race distances
RACE_DISTANCE_ALIASES: Dict[str, RaceDistance] = {
    "5k": RaceDistance.FIVE_K,
    "10k": RaceDistance.TEN_K,
    "half": RaceDistance.HALF_MARATHON,
    "half_marathon": RaceDistance.HALF_MARATHON,
    "half marathon": RaceDistance.HALF_MARATHON,
    "marathon": RaceDistance.MARATHON,
}

RACE_PARAMS: Dict[RaceDistance, Dict] = {
    RaceDistance.FIVE_K: {
        "peak_volume_cap": 45,
        "long_session_cap": 12,
        "long_session_floor": 5,
        "long_session_share": 0.30,
        "minimum_long_session_target": 6,
        "long_session_growth": {"safe": 0.5, "aggressive": 0.5, "target": None},
        "weeks_recommended": 8,
        "workout_shares": {"tempo": 0.18, "intervals": 0.12, "hills": 0.12},
        "workout_bounds": {"tempo": [3, 6], "intervals": [3, 5], "hills": [3, 5]},
    },
    RaceDistance.TEN_K: {
        "peak_volume_cap": 55,
        "long_session_cap": 15,
        "long_session_floor": 7,
        "long_session_share": 0.30,
        "minimum_long_session_target": 8,
        "long_session_growth": {"safe": 0.5, "aggressive": 0.5, "target": None},
        "weeks_recommended": 10,
        "workout_shares": {"tempo": 0.18, "intervals": 0.14, "hills": 0.12},
        "workout_bounds": {"tempo": [4, 7], "intervals": [4, 6], "hills": [3, 5]},
    },
    RaceDistance.HALF_MARATHON: {
        "peak_volume_cap": 60,
        "long_session_cap": 15,
        "long_session_floor": 12,
        "long_session_share": 0.35,
        "minimum_long_session_target": 12,
        "long_session_growth": {"safe": 0.5, "aggressive": 0.75, "target": 12},
        "weeks_recommended": 12,
        "workout_shares": {"tempo": 0.18, "intervals": 0.14, "hills": 0.12},
        "workout_bounds": {"tempo": [4, 8], "intervals": [4, 7], "hills": [4, 6]},
    },
    RaceDistance.MARATHON: {
        "peak_volume_cap": 75,
        "long_session_cap": 23,
        "long_session_floor": 20,   # Non-negotiable, overrides experience scaling
        "long_session_share": 0.35,
        "minimum_long_session_target": 18,
        "long_session_growth": {"safe": 0.5, "aggressive": 0.75, "target": 20},
        "weeks_recommended": 16,
        "workout_shares": {"tempo": 0.16, "intervals": 0.12, "hills": 0.10},
        "workout_bounds": {"tempo": [4, 10], "intervals": [4, 8], "hills": [4, 7]},
    },
}

# Peak bands by sessions per week: sessions -> (peak weekly volume, peak long session)
SESSION_BANDS: Dict[RaceDistance, Dict[int, Tuple[float, float]]] = {
    RaceDistance.FIVE_K: {3: (15, 8), 4: (25, 10), 5: (35, 12)},
    RaceDistance.TEN_K: {3: (20, 10), 4: (30, 12), 5: (40, 15), 6: (50, 18)},
    RaceDistance.HALF_MARATHON: {4: (25, 13), 5: (35, 15), 6: (45, 18), 7: (55, 20)},
    RaceDistance.MARATHON: {4: (35, 20), 5: (45, 22), 6: (60, 24), 7: (70, 26)},
}

EXPERIENCE_MULTIPLIERS: Dict[ExperienceLevel, Dict[str, float]] = {
    ExperienceLevel.BEGINNER: {"volume": 0.80, "long_session": 0.90},
    ExperienceLevel.INTERMEDIATE: {"volume": 1.00, "long_session": 1.00},
    ExperienceLevel.ADVANCED: {"volume": 1.15, "long_session": 1.10},
}

# Weekly growth applied to 2 of every 3 build weeks
GROWTH_RATE_LIMITS = {
    "max": 0.10,          # Plans of 12 weeks or less
    "min": 0.04,          # Plans of 28 weeks or more
    "short_plan_weeks": 12,
    "long_plan_weeks": 28,
}

# Final weeks as a fraction of peak volume, listed oldest first (race week last)
TAPER_FACTORS: List[float] = [0.70, 0.60]
TAPER_LONG_SESSION_FACTORS: List[float] = [0.65, 0.50]

RECOVERY_RULES = {
    "frequency": 4,        # Every 4th week
    "reduction": 0.75,     # Multiplier on the interpolated value
    "race_buffer": 2,      # No recovery weeks within 2 weeks of race day
}

LONG_SESSION_MAX_RATIO = 0.4   # Long session vs weekly volume
# Each other session in the week carrying the long-session maximum keeps at least this
MIN_SUPPORT_SESSION_DISTANCE = 2.0


# ============ Phases ============

SHORT_PLAN_MAX_WEEKS = 8

# Short plans skip the taper block
SHORT_PLAN_PROPORTIONS: Dict[PhaseName, float] = {
    PhaseName.BASE: 0.40,
    PhaseName.BUILD: 0.40,
    PhaseName.PEAK: 0.20,
}
STANDARD_PLAN_PROPORTIONS: Dict[PhaseName, float] = {
    PhaseName.BASE: 0.40,
    PhaseName.BUILD: 0.35,
    PhaseName.PEAK: 0.15,
    PhaseName.TAPER: 0.10,
}

PHASE_FOCUS: Dict[PhaseName, str] = {
    PhaseName.BASE: "Aerobic foundation",
    PhaseName.BUILD: "Strength and threshold",
    PhaseName.PEAK: "Race-specific sharpening",
    PhaseName.TAPER: "Freshen up for race day",
}


# ============ Weekly assembly ============

LONG_SESSION_SHARE = {"low_frequency": 0.35, "high_frequency": 0.30, "low_frequency_max_sessions": 4}

# Warmup/cooldown overhead on a day's base share
WORKOUT_OVERHEAD: Dict[WorkoutType, float] = {
    WorkoutType.TEMPO: 1.4,
    WorkoutType.INTERVALS: 1.25,
    WorkoutType.HILLS: 1.2,
    WorkoutType.AEROBIC_POWER: 0.8,
    WorkoutType.RECOVERY: 0.8,
    WorkoutType.EASY: 1.0,
}
CROSS_TRAINING_OVERHEAD = 0.8

# Hard-day rotation by phase
HARD_SESSION_ROTATION: Dict[PhaseName, List[WorkoutType]] = {
    PhaseName.BASE: [WorkoutType.TEMPO, WorkoutType.HILLS, WorkoutType.EASY],
    PhaseName.BUILD: [WorkoutType.TEMPO, WorkoutType.INTERVALS, WorkoutType.HILLS],
    PhaseName.PEAK: [WorkoutType.INTERVALS, WorkoutType.TEMPO, WorkoutType.HILLS],
    PhaseName.TAPER: [WorkoutType.TEMPO, WorkoutType.EASY, WorkoutType.INTERVALS],
}
BIKE_HARD_ROTATION: List[WorkoutType] = [
    WorkoutType.TEMPO, WorkoutType.INTERVALS, WorkoutType.AEROBIC_POWER
]

# (first week, running fraction) for the transitioning status; last match wins
TRANSITION_SCHEDULE: List[Tuple[int, float]] = [(1, 0.0), (3, 0.25), (5, 0.50), (7, 0.75)]

RUN_EQ_BIKE_FACTOR = 2.0             # Stand-up bike miles per RunEQ mile
CROSS_TRAINING_MINUTES_PER_MILE = 10


# ============ Workout variety ============

VARIETY_HISTORY_LIMIT = 5
PROGRESSION_CAP = 0.75          # Rep counts reach their maximum at 75% of the plan

# Catalog sub-category used for each running workout type, by phase
RUNNING_CATEGORY_BY_PHASE: Dict[WorkoutType, Dict[PhaseName, str]] = {
    WorkoutType.TEMPO: {
        PhaseName.BASE: "TRADITIONAL_TEMPO",
        PhaseName.BUILD: "TEMPO_INTERVALS",
        PhaseName.PEAK: "RACE_SPECIFIC",
        PhaseName.TAPER: "ALTERNATING_TEMPO",
    },
    WorkoutType.INTERVALS: {
        PhaseName.BASE: "LONG_INTERVALS",
        PhaseName.BUILD: "VO2_MAX",
        PhaseName.PEAK: "SHORT_SPEED",
        PhaseName.TAPER: "MIXED_INTERVALS",
    },
    WorkoutType.HILLS: {
        PhaseName.BASE: "long_strength",
        PhaseName.BUILD: "medium_vo2",
        PhaseName.PEAK: "short_power",
        PhaseName.TAPER: "short_power",
    },
    WorkoutType.LONG: {
        PhaseName.BASE: "TRADITIONAL_EASY",
        PhaseName.BUILD: "PROGRESSIVE_RUNS",
        PhaseName.PEAK: "RACE_SIMULATION",
        PhaseName.TAPER: "TRADITIONAL_EASY",
    },
}


# ============ Injury recovery ============

# Kept sessions are ranked by this order; unknown types rank last
WORKOUT_PRIORITY: List[WorkoutType] = [
    WorkoutType.RACE,
    WorkoutType.LONG,
    WorkoutType.TEMPO,
    WorkoutType.INTERVALS,
    WorkoutType.HILLS,
    WorkoutType.EASY,
    WorkoutType.RECOVERY,
]

# Equipment lacking a category falls back to an equivalent one
EQUIPMENT_CATEGORY_FALLBACKS: Dict[Equipment, Dict[WorkoutType, WorkoutType]] = {
    Equipment.ROWING: {WorkoutType.HILLS: WorkoutType.INTERVALS},
    Equipment.SWIMMING: {WorkoutType.HILLS: WorkoutType.INTERVALS},
    Equipment.POOL: {WorkoutType.HILLS: WorkoutType.INTERVALS},
}

RETURN_TO_RUNNING = {
    "running_share": 0.5,
    "distance_factor": 0.5,
    "default_distance": 3.0,
}


# ============ Pace zones ============

# Fraction of VDOT (VO2max) sustained in each zone
PACE_ZONE_INTENSITY: Dict[str, float] = {
    "easy_fast": 0.70,
    "easy_slow": 0.62,
    "marathon": 0.80,
    "threshold": 0.88,
    "interval": 0.975,
    "repetition": 1.05,
}

TRACK_SPLITS_METERS: Dict[str, List[int]] = {
    "threshold": [1200, 800, 600],
    "interval": [400, 300, 200],
}

RACE_DISTANCE_METERS: Dict[RaceDistance, float] = {
    RaceDistance.FIVE_K: 5000,
    RaceDistance.TEN_K: 10000,
    RaceDistance.HALF_MARATHON: 21097.5,
    RaceDistance.MARATHON: 42195,
}

# Conservative VDOT estimate from training when no race result exists:
# (minimum long session, vdot), checked top-down
LONG_SESSION_VDOT_TABLE: List[Tuple[float, int]] = [
    (18, 42), (15, 40), (13, 38), (10, 36), (8, 34), (6, 32), (0, 30),
]
WEEKLY_VOLUME_VDOT_TABLE: List[Tuple[float, int]] = [(40, 40), (30, 35), (20, 32), (0, 30)]


# ============ Race day ============

RACE_DAY_ADVICE: Dict[RaceDistance, List[str]] = {
    RaceDistance.FIVE_K: [
        "Race Strategy: Start controlled, hit race pace by mile 1, build through mile 2, empty the tank in the final 800m",
        "Pacing: This is a fast race - don't go out too hard, but don't be afraid to hurt",
        "Mental Game: Pain is temporary, your PR time is forever",
        "The last mile is where races are won - stay strong and finish fast!",
    ],
    RaceDistance.TEN_K: [
        "Race Strategy: First 5K controlled at goal pace, second 5K at effort (pace will feel harder but stay consistent)",
        "Pacing: Even splits are your friend - negative splits are magic",
        "Mental Game: The middle miles (2-4) are where mental toughness counts",
        "Final kilometer: Give everything you've got left!",
    ],
    RaceDistance.HALF_MARATHON: [
        "Race Strategy: Miles 1-6 feel easy, 7-10 at goal pace, 11-13 dig deep",
        "Pacing: First half should feel controlled - if you're working hard before mile 8, you went too fast",
        "Mental Game: Mile 10 is the real start of the race - this is where your training pays off",
        "The final 5K is all guts - trust your training and push through",
        "Hydration: Take water at every aid station, even if just a sip",
    ],
    RaceDistance.MARATHON: [
        "Race Strategy: Miles 1-16 should feel easy and controlled, 17-20 maintain focus, 21-26 is the real race",
        "Pacing: The first 20 miles are the warmup for the last 6 miles",
        "Mental Game: \"The wall\" at mile 20 is real - but your training prepared you for this",
        "When it gets hard around mile 20, remember: this is why you trained",
        "Hydration & Fuel: Take water/electrolytes at every station, fuel every 45min starting at mile 6",
        "Break it down: Focus on one mile at a time, not the distance remaining",
        "You've got this - you've already done the hard work in training!",
    ],
}
