import enum
from dataclasses import dataclass
from typing import ClassVar, Optional


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name.title().replace("_", "")

    __repr__ = __str__


@dataclass
class CalcError(Exception):
    errmsg: str
    position: Optional[int] = None

    label: ClassVar[str] = "Calculator error"

    def __str__(self) -> str:
        return f"[{self.label}] {self.errmsg}"

    def excerpt(self, code: str, radius: int = 10) -> str:
        """Source window around the error position with a caret under it"""
        if self.position is None:
            return ""
        code = code.rstrip("\r\n").replace("\n", " ")
        error_idx = min(self.position, len(code))
        print_start_idx = max(0, error_idx - radius)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(code), error_idx + radius)
        print_ellipsis_post = print_end_idx < len(code)
        return "\n".join(
            [
                (
                    ("..." if print_ellipsis_pre else "")
                    + code[print_start_idx:print_end_idx]
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (error_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )
