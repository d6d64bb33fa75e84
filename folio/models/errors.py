from typing import List, Sequence

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single validation failure: dotted field path + human readable reason."""
    path: str
    reason: str

    def __str__(self):
        return f"{self.path or '<record>'}: {self.reason}"


class FolioError(Exception):
    pass


class CompilationError(FolioError):
    def __init__(self, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        detail = "; ".join(str(e) for e in self.errors[:3])
        if len(self.errors) > 3:
            detail += f" (+{len(self.errors) - 3} more)"
        super().__init__(f"Record is not exportable: {detail}")


class PackagingError(FolioError):
    pass


class IntakeError(FolioError):
    pass
