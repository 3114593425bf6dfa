"""
Constants for the content retirement engine.
Score tiers, guard multipliers, clustering thresholds and per-action risk values.
"""

# =============================================================================
# ACTIONS
# =============================================================================

ACTION_KEEP = 'keep'
ACTION_REFRESH = 'refresh'
ACTION_CONSOLIDATE = 'consolidate'
ACTION_PRUNE = 'prune'
ACTION_REDIRECT = 'redirect'

# Breakdown order used by the simulation report
ACTION_TYPES = [
    ACTION_KEEP,
    ACTION_REFRESH,
    ACTION_CONSOLIDATE,
    ACTION_PRUNE,
    ACTION_REDIRECT,
]

# Actions that take a URL out of the index
INDEX_REMOVING_ACTIONS = {ACTION_PRUNE, ACTION_REDIRECT, ACTION_CONSOLIDATE}

# =============================================================================
# ZOMBIE SCORE
# =============================================================================

DEFAULT_WEIGHTS = {
    'traffic': 0.30,
    'rank': 0.20,
    'engagement': 0.10,
    'freshness': 0.15,
    'cannibal': 0.15,
    'no_value': 0.10,
}

# (max_clicks_exclusive, max_impressions_exclusive, risk) - first match wins.
# clicks == 0 is handled separately as the top tier.
TRAFFIC_TIERS = [
    (5, 500, 70),
    (20, 1000, 50),
]
TRAFFIC_ZERO_CLICK_IMPRESSIONS = 100
TRAFFIC_ZERO_CLICK_RISK = 90
TRAFFIC_LOW_CLICKS = 100
TRAFFIC_LOW_RISK = 30
TRAFFIC_FLOOR_RISK = 10

# (min_position_exclusive, risk)
RANK_POSITION_TIERS = [
    (50, 90),
    (30, 70),
    (20, 50),
    (10, 30),
]
# (max_ctr_exclusive, risk) - only reached for page 1 or unranked URLs
RANK_CTR_TIERS = [
    (0.01, 80),
    (0.02, 60),
    (0.05, 40),
]
RANK_FLOOR_RISK = 10

ENGAGEMENT_BASE_RISK = 50
ENGAGEMENT_HIGH_BOUNCE = 0.8
ENGAGEMENT_HIGH_BOUNCE_RISK = 30
ENGAGEMENT_SHORT_VISIT_SECONDS = 30
ENGAGEMENT_SHORT_VISIT_RISK = 20
ENGAGEMENT_FEW_SESSIONS = 5
ENGAGEMENT_FEW_SESSIONS_RISK = 20

# (min_age_months_exclusive, risk)
FRESHNESS_TIERS = [
    (24, 80),
    (12, 60),
    (6, 40),
    (3, 20),
]
FRESHNESS_FLOOR_RISK = 10

NO_VALUE_NO_CONVERSIONS = 30
NO_VALUE_NO_BACKLINKS = 20
NO_VALUE_NO_CLICKS = 30
NO_VALUE_LOW_IMPRESSIONS = 50
NO_VALUE_LOW_IMPRESSIONS_RISK = 20

# Applied in this order, each independently
GUARD_MULTIPLIERS = [
    ('has_backlinks', 0.3),
    ('has_conversions', 0.2),
    ('has_page1_ranking', 0.1),
    ('has_recent_traffic', 0.5),
]

PAGE_ONE_MAX_POSITION = 10

SCORE_MIN = 0.0
SCORE_MAX = 100.0

# =============================================================================
# SIMILARITY
# =============================================================================

SIMILARITY_WEIGHTS = {
    'title': 0.3,
    'body': 0.4,
    'headings': 0.2,
    'url': 0.1,
}

# Strictly greater than this joins the seed's cluster
CLUSTER_SIMILARITY_THRESHOLD = 0.7

# =============================================================================
# DECISIONS
# =============================================================================

# Fixed (risk, confidence) per cascade branch
DECISION_VALUES = {
    'guard_override': (5, 95),
    'cannibalization': (15, 85),
    'refresh': (20, 75),
    'redirect': (25, 70),
    'prune': (30, 80),
    'default': (10, 60),
}

CANNIBAL_SIMILARITY_THRESHOLD = 0.85

REFRESH_SCORE_MIN = 40
REFRESH_SCORE_MAX = 70
REFRESH_MIN_CLICKS = 10
REFRESH_MIN_IMPRESSIONS = 500
REFRESH_MIN_AGE_MONTHS = 6

REDIRECT_SCORE_MIN = 60
REDIRECT_MAX_CLICKS = 5
REDIRECT_MAX_IMPRESSIONS = 200

PRUNE_SCORE_MIN = 75
PRUNE_MAX_CLICKS = 2
PRUNE_MAX_IMPRESSIONS = 100

# Refresh brief issue checks
BRIEF_POOR_RANK_POSITION = 20
BRIEF_LOW_CTR = 0.02
BRIEF_DECLINING_CLICKS = 20
BRIEF_OUTDATED_AGE_MONTHS = 12

# =============================================================================
# SIMULATION
# =============================================================================

HIGH_RISK_THRESHOLD = 50

CRAWL_BUDGET_MIN = 10
CRAWL_BUDGET_MAX = 100
CRAWL_BUDGET_IMPRESSIONS_DIVISOR = 100
CONSOLIDATE_CRAWL_FACTOR = 0.5

# Share of clicks carried over by each action
TRAFFIC_RETENTION = {
    ACTION_CONSOLIDATE: 0.8,
    ACTION_REDIRECT: 0.8,
    ACTION_REFRESH: 0.3,
}

PRUNE_LOSS_RISK_THRESHOLD = 30
REDIRECT_LOSS_RISK_THRESHOLD = 40
REDIRECT_LOSS_FACTOR = 0.2

RISK_LEVEL_LOW_MAX_LOSS = 100
RISK_LEVEL_MEDIUM_MAX_HIGH_RISK = 5
RISK_LEVEL_MEDIUM_MAX_LOSS = 500
