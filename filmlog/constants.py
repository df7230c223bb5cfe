#!/usr/bin/env python3
"""
Shared constants for the export reconciliation and statistics pipeline

Single source of truth for column aliases, table roles, thresholds and word lists.
DO NOT duplicate these lists in other modules - import from here instead.
"""

# Recognized table roles, keyed by canonical file name (lower-cased base name)
ROLE_FILENAMES = {
    'watched.csv': 'watched',
    'ratings.csv': 'ratings',
    'reviews.csv': 'reviews',
    'diary.csv': 'diary',
    'watchlist.csv': 'watchlist',
    'profile.csv': 'profile',
    'comments.csv': 'comments',
    'likes.csv': 'likes',
}

ROLES = tuple(ROLE_FILENAMES.values())
UNKNOWN_ROLE = 'unknown'

# Roles whose rows reference films and are folded into film records.
# profile.csv and comments.csv carry no film identity and are never merged.
MERGED_ROLES = ('watched', 'ratings', 'reviews', 'diary', 'likes', 'watchlist')

# Column aliases, in priority order. Lookup is case- and whitespace-insensitive.
NAME_FIELDS = ('Name', 'Film', 'Title')
YEAR_FIELDS = ('Year',)
URL_FIELDS = ('Letterboxd URI', 'URI', 'Link', 'Url', 'URL')
RATING_FIELDS = ('Rating', 'Rated', 'Stars')
WATCHED_DATE_FIELDS = ('Watched Date', 'Watched', 'Date')
LOGGED_DATE_FIELDS = ('Logged Date', 'Date', 'Diary Date')
REVIEW_TEXT_FIELDS = ('Review', 'Text', 'Content')
REWATCH_FIELDS = ('Rewatch',)
TAG_FIELDS = ('Tags',)

# Date a row was recorded/imported (watched.csv), distinct from the diary watch date
IMPORT_DATE_FIELDS = ('Date', 'Created Date', 'Imported Date')
RATED_DATE_FIELDS = ('Date', 'Rated Date')

TRUTHY_VALUES = ('yes', 'true', '1')

# Non-ISO date formats accepted after the leading YYYY-MM-DD check fails.
# Slash dates are day-first; month-first US dates (03/15/2024) are not accepted.
DATE_FORMATS = (
    '%Y/%m/%d',
    '%d/%m/%Y',
    '%d.%m.%Y',
    '%d %b %Y',
    '%d %B %Y',
    '%b %d, %Y',
    '%B %d, %Y',
)

# Valid release-year window (anything outside is treated as absent)
MIN_RELEASE_YEAR = 1870
MAX_RELEASE_YEAR = 2100

# Rating scale: half-star buckets 0.5 .. 5.0
RATING_MIN = 0.5
RATING_MAX = 5.0
RATING_STEP = 0.5
STAR_GLYPH = '★'
HALF_GLYPH = '½'

# Rating buckets counted as "indecisive" (middle of the scale)
INDECISIVE_BUCKETS = (2.5, 3.0)

# Film URL shapes used for identity
FILM_PATH_SEGMENT = 'film'
SHORT_LINK_HOSTS = ('boxd.it',)

# Identity key prefixes
SLUG_KEY_PREFIX = 'film:'
SHORT_LINK_KEY_PREFIX = 'boxd:'
RAW_URL_KEY_PREFIX = 'url:'
SYNTHETIC_KEY_PREFIX = 'unknown:'
NAME_YEAR_SEPARATOR = '::'
UNKNOWN_YEAR = 'unknown'
UNKNOWN_NAME = 'Unknown'

# Open question: should diary.csv ratings populate the film rating?
# False keeps rating owned solely by ratings.csv.
DIARY_SETS_RATING = False

# Import spike detection (bulk history import on one calendar day)
IMPORT_SPIKE_MIN_SHARE = 0.30       # share of watched.csv rows on the busiest import day
IMPORT_SPIKE_MIN_COUNT = 20         # busiest import day must hold at least this many rows
IMPORT_SPIKE_MIN_SPAN_YEARS = 1     # real activity must span more than this many years (in days)
DAYS_PER_YEAR = 365

# Debug output
DEBUG_SAMPLE_SIZE = 5

# Review text
REVIEW_SAMPLE_MAX_CHARS = 500
TOP_WORDS = 25
MIN_TOKEN_LENGTH = 2
STOPWORDS = frozenset([
    'the', 'and', 'for', 'that', 'with', 'this', 'have', 'you', 'are', 'was',
    'film', 'movie', 'just', 'very', 'really', 'good', 'great', 'like', 'dont',
    'didnt', 'but', 'not', 'its', 'his', 'her', 'they', 'what', 'from', 'all',
    'one', 'out', 'there', 'about', 'some', 'more', 'when', 'who', 'into',
])

# Review persona rules
ESSAYIST_MIN_AVG_LENGTH = 420
EXPRESSION_FULL_LENGTH = 350
EMOTIONAL_WORDS = frozenset(['cry', 'love', 'hate', 'amazing', 'terrible', 'beautiful', 'awful'])
ANALYTICAL_WORDS = frozenset(['editing', 'frame', 'narrative', 'structure', 'cinema', 'score', 'pacing'])

# Timeline
TOP_STREAKS = 3
RECENT_SHORT_MONTHS = 12
RECENT_LONG_MONTHS = 24
TOP_YEARS = 10
COMFORT_ZONE_DECADES = 5

# Badge classification thresholds (commitment = rated/watched, volatility = rating std dev)
COMMITMENT_HIGH = 0.8
COMMITMENT_LOW = 0.3
VOLATILITY_HIGH = 1.0
VOLATILITY_LOW = 0.6

BADGE_SILENT = 'Silent Watcher'
BADGE_PASSIONATE = 'Passionate Judge'
BADGE_DEDICATED = 'Dedicated Rater'
BADGE_CASUAL = 'Casual Viewer'
BADGE_WILDCARD = 'Wildcard'
BADGE_STEADY = 'Steady Hand'
BADGE_BALANCED = 'Balanced Viewer'

DEFAULT_LABEL = 'You'

# Consumer projections
DOSSIER_FILM_LIMIT = 500
DOSSIER_REVIEW_SAMPLES = 2
