"""
phonescan/detectors/keyword_detector.py
Deterministic risk classification for message bodies.

Each category has a keyword list and a regex. A category fires when any
keyword equals a word token of the lower-cased body, or when its regex
matches the original body (case-insensitive). Keyword matching is exact
per token: multi-word entries such as 'money laundering' can only be
reached through the regex path.

Categories are checked in CATEGORY_ORDER and the first hit wins, so a
body with both fraud and threat wording is labelled 'fraud'. Negative
sentiment is the last resort.

Detectors are pure functions over text. Search re-runs them on stored
bodies instead of trusting stored flags.
"""

import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Pattern, Tuple

from nltk.tokenize import RegexpTokenizer

from phonescan.detectors.sentiment import is_negative

# ── RULE TABLES ──────────────────────────────────────────────

FRAUD_KEYWORDS: Tuple[str, ...] = (
    'fraud', 'scam', 'money laundering', 'tax evasion', 'illegal transaction',
    'advance fee', 'phishing', 'investment scheme', 'fake lottery', 'unclaimed prize',
    'giveaway', 'credit card fraud', 'identity theft', 'wire transfer', 'account verification',
    'personal information', 'confidentiality', 'guaranteed win', 'earn money fast', 'risk-free',
)

FRAUD_PATTERN: Pattern = re.compile(
    r'buy now|limited time offer|guaranteed|risk-free|call now|exclusive deal'
    r'|free gift|act now|urgent|cash prize',
    re.IGNORECASE,
)

CRIMINAL_KEYWORDS: Tuple[str, ...] = (
    'crime', 'theft', 'robbery', 'murder', 'assault', 'terrorism', 'drug trafficking',
    'illegal possession', 'kidnapping', 'extortion', 'arson', 'stolen goods', 'gang violence',
    'underworld', 'mafia', 'hitman', 'warrant', 'crime scene', 'criminal record',
    'dakati', 'qatal', 'dhoka', 'bomb', 'explosive', 'attack', 'violence', 'assassin',
)

CRIMINAL_PATTERN: Pattern = re.compile(
    r'criminal|felony|law enforcement|arrest|warrant|wanted|gang|drug deal'
    r'|illegal|offender|explosive|attack|violence',
    re.IGNORECASE,
)

CYBERBULLYING_KEYWORDS: Tuple[str, ...] = (
    'bully', 'harass', 'threaten', 'abuse', 'victim', 'cyberstalk', 'intimidate',
    'insult', 'demean', 'humiliate', 'shame', 'mock', 'belittle', 'coerce', 'blackmail',
    'derogatory', 'malicious', 'discriminate', 'targeted attack', 'online harassment',
)

CYBERBULLYING_PATTERN: Pattern = re.compile(
    r'bully|harassment|intimidation|abuse|stalker|humiliate|shame|mock|insult|derogatory',
    re.IGNORECASE,
)

THREAT_KEYWORDS: Tuple[str, ...] = (
    'explosive', 'bomb', 'attack', 'threat', 'danger', 'hazard', 'weapon',
    'assassinate', 'kidnap', 'hostage', 'terror', 'risk', 'emergency',
    'unsafe', 'explosive device', 'chemical weapon', 'biological weapon',
)

THREAT_PATTERN: Pattern = re.compile(
    r'bomb|explosive|attack|danger|threat|risk|terror|unsafe',
    re.IGNORECASE,
)

FRAUD              = 'fraud'
CRIMINAL           = 'criminal'
CYBERBULLYING      = 'cyberbullying'
THREAT             = 'threat'
NEGATIVE_SENTIMENT = 'negative_sentiment'

CATEGORY_ORDER: Tuple[str, ...] = (
    FRAUD, CRIMINAL, CYBERBULLYING, THREAT, NEGATIVE_SENTIMENT,
)


# ── TOKENIZER ────────────────────────────────────────────────

class WordTokenizer:
    """Splits text into word tokens; punctuation and whitespace separate words."""

    def __init__(self, pattern: str = r'\w+'):
        self._tokenizer = RegexpTokenizer(pattern)

    def tokenize(self, text: str) -> List[str]:
        return self._tokenizer.tokenize(text or '')


_tokenizer = WordTokenizer()


def _matches(text: str, keywords: Tuple[str, ...], pattern: Pattern) -> bool:
    if not text:
        return False
    words: FrozenSet[str] = frozenset(_tokenizer.tokenize(text.lower()))
    return any(kw in words for kw in keywords) or bool(pattern.search(text))


# ── DETECTORS ────────────────────────────────────────────────

def detect_fraud(text: str) -> bool:
    return _matches(text, FRAUD_KEYWORDS, FRAUD_PATTERN)


def detect_criminal(text: str) -> bool:
    return _matches(text, CRIMINAL_KEYWORDS, CRIMINAL_PATTERN)


def detect_cyberbullying(text: str) -> bool:
    return _matches(text, CYBERBULLYING_KEYWORDS, CYBERBULLYING_PATTERN)


def detect_threat(text: str) -> bool:
    return _matches(text, THREAT_KEYWORDS, THREAT_PATTERN)


def detect_negative_sentiment(text: str) -> bool:
    return bool(text) and is_negative(text)


DETECTORS: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    (FRAUD,              detect_fraud),
    (CRIMINAL,           detect_criminal),
    (CYBERBULLYING,      detect_cyberbullying),
    (THREAT,             detect_threat),
    (NEGATIVE_SENTIMENT, detect_negative_sentiment),
)


@dataclass(frozen=True)
class Classification:
    is_suspicious:  bool
    category:       Optional[str] = None


NOT_SUSPICIOUS = Classification(is_suspicious=False)


def classify(text: Optional[str]) -> Classification:
    """
    Evaluate detectors in precedence order and stop at the first hit.
    is_suspicious is True exactly when a category was assigned.
    """
    if not text:
        return NOT_SUSPICIOUS
    for label, detector in DETECTORS:
        if detector(text):
            return Classification(is_suspicious=True, category=label)
    return NOT_SUSPICIOUS
