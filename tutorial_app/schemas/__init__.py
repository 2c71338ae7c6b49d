from .tutorial_schema import TutorialSchema, format_validation_error

__all__ = ["TutorialSchema", "format_validation_error"]
