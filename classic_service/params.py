"""
Per-request matting parameters.

A `MattingParams` value is built once per request and never mutated. Values
outside their documented range are clamped on construction, so any instance
handed to the pipeline is already valid.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import string
from typing import Optional, Tuple, Union

from .errors import InvalidParameter

RawValue = Union[str, int, float, None]
RGB = Tuple[int, int, int]

MAX_SIZE_RANGE = (128, 4096)
TOL_RANGE = (1.0, 200.0)
HARD_RANGE = (5.0, 400.0)
FEATHER_RANGE = (0.5, 10.0)
DESPECKLE_RANGE = (0, 3)

DEFAULT_MAX_SIZE = 1024
DEFAULT_TOL = 35.0
DEFAULT_HARD = 55.0
DEFAULT_FEATHER = 2.5
DEFAULT_DESPECKLE = 1


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def _to_finite_float(name: str, value) -> float:
    try:
        number = float(value)
    except OverflowError as exc:
        raise InvalidParameter(f"{name} is out of range") from exc
    if not math.isfinite(number):
        raise InvalidParameter(f"{name} must be finite")
    return number


def _parse_number(name: str, value: RawValue) -> Optional[float]:
    """Parse a transport value; `None` or a blank string means "use the default"."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            number = float(value)
        except ValueError as exc:
            raise InvalidParameter(f"{name} must be a number, got {value!r}") from exc
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise InvalidParameter(f"{name} must be a number")
    return _to_finite_float(name, number)


def parse_hex_color(value: Optional[str]) -> Optional[RGB]:
    """Parse `#RRGGBB` / `RRGGBB`. Blank means no color; anything else malformed raises."""
    if value is None:
        return None
    raw = value.strip()
    if raw.startswith("#"):
        raw = raw[1:]
    if not raw:
        return None
    if len(raw) != 6 or any(c not in string.hexdigits for c in raw):
        raise InvalidParameter(f"matte must be a 6-digit hex color, got {value!r}")
    return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))


@dataclass(frozen=True)
class MattingParams:
    max_size: int = DEFAULT_MAX_SIZE
    tol: float = DEFAULT_TOL  # lower RGB distance: at or below is background
    hard: float = DEFAULT_HARD  # upper RGB distance, always > tol
    feather: float = DEFAULT_FEATHER  # multiplier on the midpoint upper bound
    despeckle: int = DEFAULT_DESPECKLE  # blur/re-threshold rounds
    matte: Optional[RGB] = None

    def __post_init__(self) -> None:
        for name in ("max_size", "tol", "hard", "feather", "despeckle"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameter(f"{name} must be a finite number")
            _to_finite_float(name, value)

        tol = float(_clamp(self.tol, *TOL_RANGE))
        hard = max(tol + 1.0, float(_clamp(self.hard, *HARD_RANGE)))
        object.__setattr__(self, "max_size", int(_clamp(int(self.max_size), *MAX_SIZE_RANGE)))
        object.__setattr__(self, "tol", tol)
        object.__setattr__(self, "hard", hard)
        object.__setattr__(self, "feather", float(_clamp(self.feather, *FEATHER_RANGE)))
        object.__setattr__(self, "despeckle", int(_clamp(int(self.despeckle), *DESPECKLE_RANGE)))

        if self.matte is not None:
            if len(self.matte) != 3 or any(
                isinstance(c, bool) or not isinstance(c, int) or not 0 <= c <= 255 for c in self.matte
            ):
                raise InvalidParameter("matte must be three integers in 0..255")
            object.__setattr__(self, "matte", tuple(self.matte))

    @classmethod
    def from_raw(
        cls,
        max_size: RawValue = None,
        tol: RawValue = None,
        hard: RawValue = None,
        feather: RawValue = None,
        despeckle: RawValue = None,
        matte: Optional[str] = None,
        default_max_size: int = DEFAULT_MAX_SIZE,
    ) -> "MattingParams":
        """
        Build parameters from transport values (query strings, JSON numbers).

        Missing values fall back to defaults; integer parameters truncate
        fractional input.

        Raises:
            InvalidParameter: when a value is not a finite number or the matte
                is not a hex color.
        """
        parsed_max_size = _parse_number("maxSize", max_size)
        parsed_tol = _parse_number("tol", tol)
        parsed_hard = _parse_number("hard", hard)
        parsed_feather = _parse_number("feather", feather)
        parsed_despeckle = _parse_number("despeckle", despeckle)

        return cls(
            max_size=int(parsed_max_size) if parsed_max_size is not None else default_max_size,
            tol=parsed_tol if parsed_tol is not None else DEFAULT_TOL,
            hard=parsed_hard if parsed_hard is not None else DEFAULT_HARD,
            feather=parsed_feather if parsed_feather is not None else DEFAULT_FEATHER,
            despeckle=int(parsed_despeckle) if parsed_despeckle is not None else DEFAULT_DESPECKLE,
            matte=parse_hex_color(matte),
        )

    @property
    def tol2(self) -> float:
        return self.tol * self.tol

    @property
    def hard2(self) -> float:
        return self.hard * self.hard
