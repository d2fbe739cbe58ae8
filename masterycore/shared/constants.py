"""Application-wide constants.

This module centralizes magic numbers that are used across multiple
modules. Values that need to be configurable at runtime belong in
MasteryConfig instead.
"""

# ===================
# Time
# ===================

MS_PER_SECOND = 1000
MS_PER_DAY = 24 * 60 * 60 * 1000


# ===================
# Proficiency Defaults
# ===================

# Neutral starting point for a topic that has never been attempted
DEFAULT_PROFICIENCY = 0.5
DEFAULT_CONFIDENCE = 0.0

# Proficiency at or above which a topic counts as mastered in stats
MASTERED_PROFICIENCY = 0.8


# ===================
# Scoring
# ===================

# Timing bands relative to the optimal answer time
FAST_ANSWER_RATIO = 0.7
SLOW_ANSWER_RATIO = 2.0

# Trend detection
DEFAULT_TREND_WINDOW = 10
MIN_TREND_POINTS = 3
STABLE_SLOPE_EPSILON = 0.01


# ===================
# Scheduler
# ===================

MIN_PROFICIENCY_MULTIPLIER = 0.5
MAX_STREAK_DOUBLINGS = 6


# ===================
# Weak Areas
# ===================

# Only topics scoring above this are reported
WEAK_AREA_MIN_PRIORITY = 30
MAX_PRIORITY = 100

DECLINING_TREND_BOOST = 25
MAX_OVERDUE_BOOST = 20
OVERDUE_BOOST_PER_DAY = 2
ERROR_PRONE_STREAK = 3
ERROR_PRONE_BOOST_PER_MISS = 5
RECENT_PRACTICE_DAMPENER = 0.5

LOW_PROFICIENCY_CUTOFF = 0.5

BASE_RECOMMENDED_QUESTIONS = 5
MIN_RECOMMENDED_QUESTIONS = 3
MAX_RECOMMENDED_QUESTIONS = 15
MINUTES_PER_QUESTION = 2

# Success-rate ceilings per tier below which that tier becomes the focus
EASY_FOCUS_RATE = 0.7
MED_FOCUS_RATE = 0.6
HARD_FOCUS_RATE = 0.5


# ===================
# Recommendations
# ===================

MAX_WEAK_AREAS_PER_RECOMMENDATION = 3
WEAK_AREAS_PRIORITY = 90
WEAK_AREAS_PROFICIENCY_GAIN = 0.15

SPACED_REVIEW_PRIORITY = 70
SPACED_REVIEW_QUESTIONS_PER_TOPIC = 3
SPACED_REVIEW_MINUTES_PER_TOPIC = 6
SPACED_REVIEW_PROFICIENCY_GAIN = 0.05

CHALLENGE_PRIORITY = 50
CHALLENGE_MIN_PROFICIENCY = 0.8
CHALLENGE_MIN_CONFIDENCE = 0.7
CHALLENGE_MIN_TOPICS = 3
CHALLENGE_MAX_TOPICS = 5
CHALLENGE_QUESTION_COUNT = 10
CHALLENGE_DURATION_MINUTES = 25
CHALLENGE_PROFICIENCY_GAIN = 0.08
