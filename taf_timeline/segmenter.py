"""Split a TAF body into raw forecast segments at change markers."""
import re
from typing import List

FM_TOKEN = re.compile(r'^FM\d{6}$')
PROB_TOKEN = re.compile(r'^PROB\d{2}$')
TRANSITION_KEYWORDS = ('BECMG', 'TEMPO')


def is_segment_start(token: str) -> bool:
    """Check if a token opens a new forecast segment."""
    return (
        bool(FM_TOKEN.match(token))
        or token in TRANSITION_KEYWORDS
        or bool(PROB_TOKEN.match(token))
    )


def split_into_segments(body: str) -> List[str]:
    """
    Split a TAF body into segment texts.

    The first segment is whatever precedes the first marker. A TEMPO that
    directly follows a lone PROBnn token stays in the PROB segment.

    Args:
        body: TAF text without its header

    Returns:
        Ordered list of segment strings (tokens joined by single spaces)
    """
    if not body:
        return []

    segments = []
    current: List[str] = []

    for token in body.split():
        tempo_after_prob = (
            token == 'TEMPO'
            and len(current) == 1
            and bool(PROB_TOKEN.match(current[0]))
        )

        if is_segment_start(token) and current and not tempo_after_prob:
            segments.append(' '.join(current))
            current = [token]
        else:
            current.append(token)

    if current:
        segments.append(' '.join(current))

    return segments
