"""
Lightweight keyword heuristics over queries and answers:
related topics, follow-up suggestions and key-insight lines.
"""

import re

STOP_WORDS = frozenset({
    "the", "and", "for", "with", "that", "this", "from", "into", "about",
    "what", "how", "why", "are", "was", "were", "can", "should", "would",
    "please", "your", "you",
})

TOPIC_MAPPING = {
    "oracle": "Database",
    "postgres": "Database",
    "mysql": "Database",
    "azure": "Cloud Platform",
    "aws": "Cloud Platform",
    "gcp": "Cloud Platform",
    "performance": "Performance Tuning",
    "speed": "Performance Tuning",
    "latency": "Performance Tuning",
    "query": "SQL Optimization",
    "sql": "SQL Optimization",
    "memory": "Memory Management",
    "cpu": "System Performance",
    "network": "Network Configuration",
    "security": "Security Analysis",
}

_WORD_RE = re.compile(r"[^\w\s]", re.UNICODE)
_INSIGHT_RE = re.compile(r"^\s*(#{2,}\s|.*\b(conclusion|recommend|important|note|warning)\b)", re.IGNORECASE)

MAX_FOLLOWUPS = 3
MAX_INSIGHTS = 5


def extract_keywords(text: str) -> list[str]:
    words = _WORD_RE.sub("", text.lower()).split()
    seen: list[str] = []
    for word in words:
        if len(word) >= 3 and word not in STOP_WORDS and word not in seen:
            seen.append(word)
    return seen


def is_topic_relevant(previous_query: str, current_query: str, min_shared: int = 2) -> bool:
    shared = set(extract_keywords(previous_query)) & set(extract_keywords(current_query))
    return len(shared) >= min_shared


def extract_related_topics(query: str) -> list[str]:
    topics: list[str] = []
    for keyword in extract_keywords(query):
        topic = TOPIC_MAPPING.get(keyword)
        if topic and topic not in topics:
            topics.append(topic)
    return topics


def suggest_followups(query: str, successful_count: int) -> list[str]:
    suggestions = []
    lowered = query.lower()

    if successful_count >= 3:
        suggestions.append("Ask for detailed implementation steps")
        suggestions.append("Discuss a related technical problem")

    if "performance" in lowered or "speed" in lowered or "slow" in lowered:
        suggestions.append("Ask how to monitor performance continuously")
        suggestions.append("Ask how to prevent similar problems")

    if "error" in lowered or "fail" in lowered:
        suggestions.append("Dig into the root cause of the error")
        suggestions.append("Ask how to monitor for similar errors")

    return suggestions[:MAX_FOLLOWUPS]


def extract_key_insights(text: str) -> list[str]:
    if not text:
        return []
    insights = [line.strip() for line in text.splitlines() if line.strip() and _INSIGHT_RE.match(line)]
    return insights[:MAX_INSIGHTS]
