from typing import Any, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from folio.models.errors import FieldError
from folio.models.portfolio import PortfolioRecord
from folio.utils.dates import is_present, parse_date_with_precision, truncate

M = TypeVar("M", bound=BaseModel)


class ValidationResult(BaseModel):
    record: Optional[PortfolioRecord] = None
    errors: List[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None and not self.errors


def field_path(loc) -> str:
    return ".".join(str(part) for part in loc)


def parse_model(model: Type[M], candidate: Any) -> Tuple[Optional[M], List[FieldError]]:
    """Runs pydantic validation and turns failures into FieldErrors instead of raising."""
    try:
        return model.model_validate(candidate), []
    except PydanticValidationError as exc:
        errors = [
            FieldError(path=field_path(err["loc"]), reason=err["msg"])
            for err in exc.errors()
        ]
        return None, errors


# -----------------------------------------------------------------------------
# CROSS-FIELD RULES
# -----------------------------------------------------------------------------

def _out_of_order(start: str, end: str) -> bool:
    """True only when both ends parse and the end falls before the start."""
    if is_present(end):
        return False
    start_d, start_p = parse_date_with_precision(start)
    end_d, end_p = parse_date_with_precision(end)
    if start_d is None or end_d is None:
        return False
    precision = min(start_p, end_p)
    return truncate(end_d, precision) < truncate(start_d, precision)


def check_dates(record: PortfolioRecord) -> List[FieldError]:
    errors = []
    for i, entry in enumerate(record.education):
        if _out_of_order(entry.start_date, entry.end_date):
            errors.append(FieldError(
                path=f"education.{i}.endDate",
                reason=f"end date '{entry.end_date}' is before start date '{entry.start_date}'",
            ))
    for i, entry in enumerate(record.work_experience):
        if _out_of_order(entry.start_date, entry.end_date):
            errors.append(FieldError(
                path=f"workExperience.{i}.endDate",
                reason=f"end date '{entry.end_date}' is before start date '{entry.start_date}'",
            ))
    return errors


def check_responsibilities(record: PortfolioRecord) -> List[FieldError]:
    return [
        FieldError(
            path=f"workExperience.{i}.responsibilities",
            reason="at least one responsibility is required",
        )
        for i, entry in enumerate(record.work_experience)
        if not entry.responsibilities
    ]


# -----------------------------------------------------------------------------
# ENTRY POINT
# -----------------------------------------------------------------------------

def validate(candidate: Any) -> ValidationResult:
    """
    Turns an untyped candidate (AI output, record file, admin edit) into a
    PortfolioRecord, or a non-empty list of field errors. Never raises for bad
    input; malformed data is an ordinary result.
    """
    if isinstance(candidate, PortfolioRecord):
        candidate = candidate.to_wire()

    record, errors = parse_model(PortfolioRecord, candidate)
    if errors:
        return ValidationResult(errors=errors)

    errors = check_dates(record) + check_responsibilities(record)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(record=record)
