# core/router.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Route:
    name: str
    path: str


SUMMARIZE = Route("summarize", "/summarize")
TRANSFORM = Route("transform", "/api/v1/transform")
PROMPT = Route("prompt", "/prompt")

SUMMARY_KEYWORDS = ("summarize", "summary")

STYLE_KEYWORDS = (
    "formal", "professional", "business", "official",
    "simplify", "simple", "easier", "beginner", "layman",
    "tone", "casual", "friendly", "warm", "conversational", "confident",
)


def _contains_any(keywords) -> Callable[[str], bool]:
    return lambda text: any(kw in text for kw in keywords)


# First match wins; PROMPT is the catch-all.
ROUTES: List[Tuple[Callable[[str], bool], Route]] = [
    (_contains_any(SUMMARY_KEYWORDS), SUMMARIZE),
    (_contains_any(STYLE_KEYWORDS), TRANSFORM),
    (lambda text: True, PROMPT),
]


def route_command(command: str) -> Route:
    """
    Very simple keyword router from a user command -> backend operation.
    A best-effort heuristic: "summarize this formally" goes to summarize.
    """
    t = (command or "").strip().lower()
    for matches, route in ROUTES:
        if matches(t):
            log.debug("Routing %r -> %s", t, route.path)
            return route
    return PROMPT
