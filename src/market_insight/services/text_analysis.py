# src/market_insight/services/text_analysis.py
"""
Headline heuristics shared by every news adapter:
relevance scoring, category and impact buckets, source tiers and lexical
sentiment. All matching is lowercase substring matching.
"""

from typing import Optional, Tuple

from src.market_insight.schemas.news import (
    ImpactLevel,
    NewsCategory,
    Sentiment,
    SourceTier,
)

RELEVANCE_KEYWORDS: Tuple[str, ...] = (
    "earnings", "revenue", "profit", "loss", "guidance", "outlook", "forecast",
)
RELEVANCE_HIGH_IMPACT: Tuple[str, ...] = (
    "ceo", "acquisition", "merger", "partnership", "lawsuit",
)
SYMBOL_MATCH_POINTS = 10
KEYWORD_POINTS = 5
HIGH_IMPACT_POINTS = 3

# First matching bucket wins
CATEGORY_RULES: Tuple[Tuple[NewsCategory, Tuple[str, ...]], ...] = (
    (NewsCategory.EARNINGS, ("earnings", "revenue", "profit")),
    (NewsCategory.ANALYST, ("analyst", "rating", "target")),
    (NewsCategory.CORPORATE, ("merger", "acquisition", "partnership")),
    (NewsCategory.LEGAL, ("lawsuit", "regulation", "investigation")),
)

IMPACT_HIGH_WORDS: Tuple[str, ...] = (
    "earnings", "revenue", "ceo", "merger", "acquisition", "lawsuit", "fda", "bankruptcy",
)
IMPACT_MEDIUM_WORDS: Tuple[str, ...] = (
    "analyst", "upgrade", "downgrade", "target", "forecast", "guidance",
)

TIER1_SOURCES: Tuple[str, ...] = (
    "reuters", "bloomberg", "wall street journal", "financial times", "wsj",
)
TIER2_SOURCES: Tuple[str, ...] = ("cnbc", "marketwatch", "barrons", "yahoo finance")

TIER_WEIGHTS = {SourceTier.TIER1: 3, SourceTier.TIER2: 2, SourceTier.TIER3: 1}

POSITIVE_WORDS: Tuple[str, ...] = (
    "gain", "rise", "up", "bullish", "buy", "strong", "growth", "beat", "exceed",
    "upgrade", "positive", "profit", "surge", "rally", "optimistic",
)
NEGATIVE_WORDS: Tuple[str, ...] = (
    "fall", "drop", "down", "bearish", "sell", "weak", "decline", "miss",
    "downgrade", "negative", "loss", "crash", "plunge", "disappointing",
)

# Alpha Vantage overall_sentiment_score bucket edges
PROVIDER_SENTIMENT_THRESHOLD = 0.1


def calculate_relevance_score(headline: str, summary: Optional[str], symbol: str) -> int:
    """
    +10 when the symbol appears, +5 per financial keyword, +3 per high-impact
    term. Each term counts once; the score is not capped.
    """
    text = f"{headline or ''} {summary or ''}".lower()
    score = 0

    if symbol and symbol.lower() in text:
        score += SYMBOL_MATCH_POINTS

    score += KEYWORD_POINTS * sum(1 for kw in RELEVANCE_KEYWORDS if kw in text)
    score += HIGH_IMPACT_POINTS * sum(1 for kw in RELEVANCE_HIGH_IMPACT if kw in text)

    return score


def categorize_news(headline: str) -> NewsCategory:
    text = (headline or "").lower()
    for category, words in CATEGORY_RULES:
        if any(word in text for word in words):
            return category
    return NewsCategory.GENERAL


def get_impact_level(headline: str) -> ImpactLevel:
    text = (headline or "").lower()
    if any(word in text for word in IMPACT_HIGH_WORDS):
        return ImpactLevel.HIGH
    if any(word in text for word in IMPACT_MEDIUM_WORDS):
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


def get_source_tier(source_name: Optional[str]) -> SourceTier:
    name = (source_name or "").lower()
    if any(source in name for source in TIER1_SOURCES):
        return SourceTier.TIER1
    if any(source in name for source in TIER2_SOURCES):
        return SourceTier.TIER2
    return SourceTier.TIER3


def tier_weight(tier: Optional[SourceTier]) -> int:
    return TIER_WEIGHTS.get(tier, 1)


def analyze_text_sentiment(text: str) -> Sentiment:
    """Lexical polarity: +1 per positive word present, -1 per negative. Ties are neutral."""
    lower_text = (text or "").lower()
    score = sum(1 for word in POSITIVE_WORDS if word in lower_text)
    score -= sum(1 for word in NEGATIVE_WORDS if word in lower_text)

    if score > 0:
        return Sentiment.POSITIVE
    if score < 0:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def bucket_provider_sentiment(score: Optional[float]) -> Sentiment:
    """Map a provider-native score in [-1, 1] onto the three labels."""
    value = float(score or 0)
    if value > PROVIDER_SENTIMENT_THRESHOLD:
        return Sentiment.POSITIVE
    if value < -PROVIDER_SENTIMENT_THRESHOLD:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
