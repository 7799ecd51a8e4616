# src/aiseo/constants.py
"""Centralized constants for the website analysis engine.

This module holds the scoring rubric (penalties, bonuses, weights) and the
network defaults shared across modules. For user-configurable thresholds, see
config.py and AnalysisThresholds.
"""

# =============================================================================
# Fetcher Constants
# =============================================================================

# Hard wall-clock timeout for a single fetch (seconds)
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10

# Maximum redirect hops followed before giving up
DEFAULT_MAX_REDIRECTS = 5

# Timeout for robots.txt / sitemap.xml probes (seconds)
PROBE_TIMEOUT_SECONDS = 5

# Concurrent fetches in a multi-page batch
DEFAULT_MAX_CONCURRENT_REQUESTS = 5

# Identifies the analyzer to the sites it fetches
DEFAULT_USER_AGENT = "AIoli-Bot/1.0 (SEO Analysis Tool)"

HTML_ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
XML_ACCEPT_HEADER = "application/xml, text/xml, */*"

# Bytes read per streamed chunk while checking the fetch deadline
READ_CHUNK_SIZE = 8192

# Internal links checked per page when broken-link checking is on
MAX_LINKS_TO_CHECK = 50


# =============================================================================
# Discovery Constants
# =============================================================================

# Pages returned by discover() when the caller gives no limit
DEFAULT_DISCOVERY_MAX_PAGES = 20

# Sitemap locations tried in order
SITEMAP_PATHS = ("/sitemap.xml", "/sitemap_index.xml", "/sitemap-index.xml")

# Nested sitemap index recursion limit
MAX_SITEMAP_DEPTH = 3

# Sitemap entries read before filtering and capping
MAX_SITEMAP_URLS = 1000

# URL fragments that never point at content pages
NON_CONTENT_PATH_MARKERS = ("/wp-admin", "/wp-content", "/feed", "/tag/", "/author/")

NON_CONTENT_EXTENSIONS = (
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".svg", ".css", ".js", ".xml", ".json",
)

IGNORED_LINK_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")


# =============================================================================
# SEO Rubric
# =============================================================================

MAX_SCORE = 100
MIN_SCORE = 0

TITLE_SHORT_PENALTY = 30
TITLE_LONG_PENALTY = 20

DESCRIPTION_SHORT_PENALTY = 30
DESCRIPTION_LONG_PENALTY = 20

MISSING_H1_PENALTY = 40
MULTIPLE_H1_PENALTY = 20
MISSING_H2_PENALTY = 20

# Per image without alt text, capped
IMAGE_ALT_PENALTY_PER_IMAGE = 10
IMAGE_ALT_PENALTY_CAP = 50

NO_INTERNAL_LINKS_PENALTY = 20
BROKEN_LINK_PENALTY_PER_LINK = 10
BROKEN_LINK_PENALTY_CAP = 50

NO_HTTPS_PENALTY = 30
NO_CANONICAL_PENALTY = 10
NO_VIEWPORT_PENALTY = 20
NO_ROBOTS_TXT_PENALTY = 10
NO_SITEMAP_PENALTY = 10

# Percent weights, must sum to 100
SEO_CATEGORY_WEIGHTS = {
    "title": 20,
    "description": 15,
    "headings": 15,
    "images": 15,
    "links": 10,
    "technical": 25,
}


# =============================================================================
# LLM Readiness Rubric
# =============================================================================

STRUCTURED_DATA_PRESENT_SCORE = 70
USEFUL_SCHEMA_TYPE_BONUS = 30
USEFUL_SCHEMA_TYPES = ("Article", "FAQPage", "HowTo", "Organization", "Person", "Product")

CLARITY_BASE_SCORE = 50
CLARITY_IDEAL_PARAGRAPH_BONUS = 20
CLARITY_LONG_PARAGRAPH_PENALTY = 10
CLARITY_NO_PARAGRAPHS_PENALTY = 20
CLARITY_FAQ_BONUS = 20
CLARITY_DEFINITIONS_BONUS = 10

AUTHOR_BASE_SCORE = 30
AUTHOR_BYLINE_BONUS = 30
AUTHOR_DATE_BONUS = 25
AUTHOR_MODIFIED_BONUS = 15

# Per blocked crawler family
AI_CRAWLER_BLOCKED_PENALTY = 25

CITABILITY_BASE_SCORE = 30
CITABILITY_QUOTES_BONUS = 20
CITABILITY_STATISTICS_BONUS = 30
CITABILITY_SOURCES_BONUS = 20

# Percent weights, must sum to 100
LLM_CATEGORY_WEIGHTS = {
    "structured_data": 25,
    "content_clarity": 20,
    "author_info": 20,
    "ai_crawler_access": 20,
    "citability": 15,
}


# =============================================================================
# AI Crawlers
# =============================================================================

GPT_BOT = "GPTBot"
ANTHROPIC_BOTS = ("anthropic-ai", "Claude-Web")
PERPLEXITY_BOT = "PerplexityBot"


# =============================================================================
# Suggestion Constants
# =============================================================================

# Category score below which suggestions are high priority
HIGH_PRIORITY_BELOW = 40

# Category score below which suggestions are medium priority
MEDIUM_PRIORITY_BELOW = 70

# Characters of the current title shown for over-long titles
TITLE_PREVIEW_CHARS = 57
