"""
Configuration constants for netsig.
===================================

This module contains the defaults used throughout the library.
Centralizing these keeps command-line runs, YAML configuration and
library calls consistent.
"""

# Master seed for reference distributions when the caller gives none
RANDOM_SEED = 42

# Reference distribution defaults
DEFAULT_N_DRAWS = 1000
DEFAULT_TAIL = "right"
DEFAULT_N_JOBS = 1
DEFAULT_BACKEND = "process"

# Degree-sequence sampling
DEFAULT_DEGREE_METHOD = "swap"
DEFAULT_SWAPS_PER_EDGE = 10
DEFAULT_MAX_RETRIES = 1000

# Community detection configuration
COMMUNITY_DETECTION_METHOD = "louvain"
COMMUNITY_DETECTION_SEED = RANDOM_SEED

