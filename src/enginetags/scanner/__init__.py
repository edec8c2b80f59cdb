"""Scanner — detector evaluation and rule corpus checks."""

from enginetags.scanner.corpus import CorpusReport, verify_corpus
from enginetags.scanner.engine import DetectorResult, evaluate_all, run

__all__ = [
    "CorpusReport",
    "DetectorResult",
    "evaluate_all",
    "run",
    "verify_corpus",
]
