class MealMuseError(Exception):
    pass


class Violation:
    def __init__(self, *, field: str, rule: str, message: str) -> None:
        self.field = field
        self.rule = rule
        self.message = message

    def __repr__(self) -> str:
        return f"<Violation(field={self.field}, rule={self.rule})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Violation):
            return NotImplemented
        return (self.field, self.rule, self.message) == (
            other.field,
            other.rule,
            other.message,
        )

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}


class ValidationError(MealMuseError):
    """Input rejected before any external call was made."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = violations
        fields = ", ".join(v.field for v in violations)
        super().__init__(f"Invalid input: {fields}")

    @property
    def fields(self) -> dict[str, str]:
        """First message per field, for rendering inline under a form input."""
        messages: dict[str, str] = {}
        for v in self.violations:
            messages.setdefault(v.field, v.message)
        return messages


class GenerationError(MealMuseError):
    """The model call failed or returned something off schema."""


class IdentityError(MealMuseError):
    def __init__(self, message: str, *, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)
