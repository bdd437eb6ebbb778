"""
Heuristic thresholds used by profiling, chart recommendation and insights.

These are fixed analysis rules, not deployment settings; see config.py for
values that can be tuned through the environment.
"""

# Type inference
TYPE_DETECTION_THRESHOLD = 0.8
CATEGORICAL_MAX_UNIQUE = 50
CATEGORICAL_MAX_UNIQUE_RATIO = 0.5
SAMPLE_VALUES_LIMIT = 10
DISTRIBUTION_MAX_UNIQUE = 20

# Statistics
Q1_POSITION = 0.25
Q3_POSITION = 0.75
IQR_MULTIPLIER = 1.5
STRONG_CORRELATION = 0.7
MODERATE_CORRELATION = 0.3

# Chart families: base priorities
PRIORITY_LINE = 9
PRIORITY_BAR = 8
PRIORITY_SCATTER_STRONG = 8
PRIORITY_HISTOGRAM = 7
PRIORITY_PIE = 6
PRIORITY_SCATTER = 6
PRIORITY_BOX = 6
PRIORITY_HEATMAP = 5

# Chart families: data limits
HISTOGRAM_MAX_BUCKETS = 20
BAR_MAX_UNIQUE = 20
BAR_MAX_CATEGORIES = 15
PIE_MAX_UNIQUE = 8
PIE_MAX_SLICES = 6
LINE_MAX_POINTS = 100
SCATTER_MAX_POINTS = 500
SCATTER_MIN_CORRELATION = 0.3
CROSS_TAB_MAX_COLUMNS = 2
BOX_MAX_UNIQUE = 10

# Chart insight heuristics
NORMAL_SKEW_BAND = 0.5
HIGH_IMBALANCE_RATIO = 10
MODERATE_IMBALANCE_RATIO = 3
PIE_DOMINANT_SHARE = 50
PIE_MAJORITY_SHARE = 30
TREND_MIN_POINTS = 3
TREND_STABLE_PERCENT = 5
SEASONALITY_MIN_POINTS = 12
SEASONALITY_PEAK_SHARE = 0.1
LINE_ANOMALY_SIGMA = 2
HEATMAP_OUTLIER_SIGMA = 1.5
SCATTER_MIN_POINTS = 10

# Rule-based insights
COMPLETENESS_WARNING = 0.9
COMPLETENESS_CRITICAL = 0.7
DUPLICATE_HIGH_SHARE = 0.05
OUTLIER_MEDIUM_SHARE = 0.05
SKEWNESS_THRESHOLD = 1

# Narrative (business) insights
NARRATIVE_SAMPLE_ROWS = 3
NARRATIVE_SAMPLE_VALUES = 3

SEVERITY_RANK = {"high": 3, "medium": 2, "low": 1}
