"""Fixed algorithm constants. Tunable values belong in Settings or DomainPolicy."""

# Recency axis: age thresholds in days and their scores
RECENT_WINDOW_DAYS = 56
YEAR_WINDOW_DAYS = 365
RECENCY_RECENT = 1.0
RECENCY_YEAR = 0.8
RECENCY_OLD = 0.6
RECENCY_UNKNOWN = 0.5

# Secondary ranking axes all carry the same small weight
DOMAIN_AXIS_WEIGHT = 0.1
RECENCY_AXIS_WEIGHT = 0.1
WHITELIST_AXIS_WEIGHT = 0.1
NON_WHITELIST_SCORE = 0.1
NEUTRAL_COSINE_SCORE = 0.5

# BM25 parameters
BM25_K1 = 1.2
BM25_B = 0.75

# A same-domain result must beat the kept one by more than this factor
DIVERSITY_REPLACEMENT_MARGIN = 1.2

# Non-whitelisted domains rank below every tier
NON_WHITELIST_TIER = 5

# Fast mode
FAST_EXTRACTION_LIMIT = 3
FAST_TIER_WEIGHT = 0.7
FAST_TITLE_MATCH_WEIGHT = 0.3
FAST_TEXT_LIMIT = 500
FULL_TEXT_LIMIT = 2000
EXCERPT_LIMIT = 200

# Conflict resolution
NUMERIC_CONFLICT_WEIGHT = 0.3
LEGAL_CONFLICT_WEIGHT = 0.2
EVIDENCE_OMISSION_WEIGHT = 0.4
NLI_WEIGHT = 0.7
RULE_WEIGHT = 0.3
NLI_TEMPERATURE = 0.0

# Conflict severity bands used for reporting
HIGH_CONFLICT_SCORE = 0.8
MEDIUM_CONFLICT_SCORE = 0.6

# Operational alert thresholds: 1h mean latency, 24h cost, 24h conflict rate
LATENCY_ALERT_MS = 10_000
DAILY_COST_ALERT = 10.0
CONFLICT_RATE_ALERT = 0.3

# Domain terms shared by evidence and drafts when both discuss the same rule
TAX_KEYWORDS = [
    "양도소득세",
    "양도세",
    "장기보유특별공제",
    "1주택",
    "다주택",
    "비과세",
    "과세",
    "세율",
    "공제",
    "면제",
]

STOPWORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in",
        "is", "it", "of", "on", "or", "that", "the", "to", "with",
        "및", "등", "또는", "그", "이", "저", "것", "수",
    }
)

# Canonical answer headings, in order: overview, tax rates, considerations, legal basis, conclusion
SECTION_HEADINGS = (
    "1. 개요/기본 원칙",
    "2. 보유·거주기간/세율 표",
    "3. 실무상 유의사항",
    "4. 관련 법령 및 근거",
    "5. 결론",
)
