"""
Message Classifier

Decides whether a chat message is a service request and assigns a priority
tier. Pure and deterministic: the verdict depends only on the text and the
rule table.

Priority precedence (first match wins):
1. ordered lexicon rules (default: low, critical, high)
2. shouting, or several problem terms in a long message -> high
3. medium lexicon, long message or several problem terms -> medium
4. default -> medium
"""
import json
import re
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from servtec.models.schemas import Classification, Priority
from servtec.services import lexicon
from servtec.utils.logger import get_logger
from servtec.utils.text import contains_keyword, fold, matching_keywords

logger = get_logger(__name__)

SHOUTING_PATTERN = re.compile(r"[A-ZÁÉÍÓÚÑ]{3,}")


def _normalize_keywords(keywords: List[str]) -> List[str]:
    """Fold and de-duplicate, keeping lexicon order"""
    return list(dict.fromkeys(fold(k).strip() for k in keywords if k.strip()))


class PriorityRule(BaseModel):
    """One (priority, lexicon) pair of the ordered rule table"""
    priority: Priority
    keywords: List[str] = Field(..., min_length=1)

    @field_validator("keywords")
    @classmethod
    def normalize(cls, v: List[str]) -> List[str]:
        return _normalize_keywords(v)


class ClassifierRules(BaseModel):
    """
    Complete classification rule table.

    Attributes:
        problem_keywords: Lexicon that marks a message as a service request
        priority_rules: Ordered lexicon rules, evaluated before the heuristics
        medium_keywords: Diagnostic/verification lexicon for the medium tier
        long_message_threshold: Length above which a message counts as detailed
        default_priority: Tier for requests no rule or heuristic matched
    """
    problem_keywords: List[str] = Field(..., min_length=1)
    priority_rules: List[PriorityRule] = Field(default_factory=list)
    medium_keywords: List[str] = Field(default_factory=list)
    long_message_threshold: int = Field(150, ge=1)
    default_priority: Priority = Priority.MEDIUM

    @field_validator("problem_keywords", "medium_keywords")
    @classmethod
    def normalize(cls, v: List[str]) -> List[str]:
        return _normalize_keywords(v)

    @classmethod
    def default(cls) -> "ClassifierRules":
        """Built-in lexicons"""
        return cls(
            problem_keywords=lexicon.PROBLEM_KEYWORDS,
            priority_rules=[
                PriorityRule(priority=Priority.LOW, keywords=lexicon.LOW_PRIORITY_KEYWORDS),
                PriorityRule(priority=Priority.CRITICAL, keywords=lexicon.CRITICAL_KEYWORDS),
                PriorityRule(priority=Priority.HIGH, keywords=lexicon.HIGH_PRIORITY_KEYWORDS),
            ],
            medium_keywords=lexicon.MEDIUM_PRIORITY_KEYWORDS,
        )

    @classmethod
    def from_file(cls, path: str) -> "ClassifierRules":
        """Load a rule table from a JSON file"""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)


class MessageClassifier:
    """Keyword/heuristic classifier for inbound chat messages"""

    def __init__(self, rules: Optional[ClassifierRules] = None):
        self.rules = rules or ClassifierRules.default()

    @classmethod
    def from_settings(cls, rules_path: str = "") -> "MessageClassifier":
        """Use the JSON rule table when a path is configured"""
        if rules_path:
            logger.info(f"Loading classifier rules from {rules_path}")
            return cls(ClassifierRules.from_file(rules_path))
        return cls()

    def classify(self, text: str) -> Classification:
        """
        Classify one message.

        Args:
            text: Raw message text

        Returns:
            Classification; non-requests carry the default medium priority
        """
        folded = fold(text).strip()
        problem_hits = matching_keywords(folded, self.rules.problem_keywords)

        if not problem_hits:
            logger.debug("Message is not a service request")
            return Classification(is_service_request=False)

        priority = self._priority(text, folded, len(problem_hits))
        logger.info(f"Service request detected (priority={priority.value}, hits={len(problem_hits)})")
        return Classification(is_service_request=True, priority=priority)

    def is_service_request(self, text: str) -> bool:
        folded = fold(text)
        return any(contains_keyword(folded, k) for k in self.rules.problem_keywords)

    def _priority(self, text: str, folded: str, problem_hits: int) -> Priority:
        for rule in self.rules.priority_rules:
            if any(contains_keyword(folded, k) for k in rule.keywords):
                return rule.priority

        several_problems = problem_hits >= 2
        is_long = len(text.strip()) > self.rules.long_message_threshold
        shouting = SHOUTING_PATTERN.search(text) is not None

        if (several_problems and is_long) or shouting:
            return Priority.HIGH

        if any(contains_keyword(folded, k) for k in self.rules.medium_keywords):
            return Priority.MEDIUM
        if is_long or several_problems:
            return Priority.MEDIUM

        return self.rules.default_priority
