# src/market_insight/services/sentiment_aggregator.py
"""Roll per-article sentiment labels up into one score and label"""

from typing import List

from src.market_insight.schemas.news import Article, Sentiment
from src.market_insight.schemas.response import SentimentDistribution, SentimentSummary

# Score above +threshold is positive, below -threshold negative
OVERALL_THRESHOLD = 20.0


def summarize_sentiment(articles: List[Article]) -> SentimentSummary:
    """
    score = (positive - negative) / total * 100, rounded to one decimal.
    An empty article list scores 0 and is neutral.
    """
    distribution = SentimentDistribution()
    for article in articles:
        if article.sentiment == Sentiment.POSITIVE:
            distribution.positive += 1
        elif article.sentiment == Sentiment.NEGATIVE:
            distribution.negative += 1
        else:
            distribution.neutral += 1

    total = len(articles)
    score = (distribution.positive - distribution.negative) / total * 100 if total else 0.0

    if score > OVERALL_THRESHOLD:
        overall = Sentiment.POSITIVE
    elif score < -OVERALL_THRESHOLD:
        overall = Sentiment.NEGATIVE
    else:
        overall = Sentiment.NEUTRAL

    return SentimentSummary(
        overall=overall,
        score=round(score, 1),
        distribution=distribution,
        articles=articles,
    )
