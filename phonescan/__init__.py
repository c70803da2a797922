"""phonescan - Android SMS, call log and contact ingestion with rule-based risk flags."""

__version__ = '1.0.0'
