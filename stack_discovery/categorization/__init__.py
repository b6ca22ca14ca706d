from stack_discovery.categorization.category_rules import DEFAULT_CATEGORY_RULES, CategoryRule
from stack_discovery.categorization.classifier import CategoryClassifier

__all__ = ["DEFAULT_CATEGORY_RULES", "CategoryClassifier", "CategoryRule"]
