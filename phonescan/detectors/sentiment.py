"""
phonescan/detectors/sentiment.py
AFINN polarity scoring. The score is the sum of per-word valences
(roughly -5..+5 each), so a short hostile message lands well below zero.

A word directly after a negator has its valence flipped:
"not bad" scores +3, "bad" scores -3.
"""

from afinn import Afinn
from nltk.tokenize import RegexpTokenizer

NEGATIVE_THRESHOLD = -2

NEGATORS = frozenset({
    'cant', "can't", 'dont', "don't", 'doesnt', "doesn't",
    'not', 'non', 'wont', "won't", 'isnt', "isn't",
})

_afinn     = Afinn(language='en')
_tokenizer = RegexpTokenizer(r"[\w']+")


def sentiment_score(text: str) -> float:
    if not text:
        return 0.0
    total    = 0.0
    previous = None
    for token in _tokenizer.tokenize(text.lower()):
        valence = _afinn.score(token)
        if valence and previous in NEGATORS:
            valence = -valence
        total   += valence
        previous = token
    return total


def is_negative(text: str) -> bool:
    return sentiment_score(text) < NEGATIVE_THRESHOLD
