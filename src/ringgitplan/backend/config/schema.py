"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

_PERCENT_TOLERANCE = 1e-9
_BASE_TAX_TOLERANCE = 0.005


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """Single progressive bracket with its cumulative tax at the lower bound."""

    lower_bound: float = Field(alias="lower")
    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float
    base_tax: float = 0.0

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0:
            raise ConfigurationError("Tax rates must be non-negative")
        if self.lower_bound < 0:
            raise ConfigurationError("Lower bounds must be non-negative")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Upper bounds must exceed the bracket lower bound")
        if self.base_tax < 0:
            raise ConfigurationError("Cumulative base tax must be non-negative")
        return self

    def contains(self, amount: float) -> bool:
        """Return ``True`` when ``amount`` falls in ``(lower, upper]``."""

        if amount <= self.lower_bound:
            return False
        return self.upper_bound is None or amount <= self.upper_bound

    def as_payload(self) -> dict[str, Any]:
        """Serialise with the short ``lower``/``upper`` keys used by the YAML and the API."""

        return {
            "lower": self.lower_bound,
            "upper": self.upper_bound,
            "rate": self.rate,
            "base_tax": self.base_tax,
        }

    def tax_at_upper_bound(self) -> float | None:
        if self.upper_bound is None:
            return None
        return self.base_tax + (self.upper_bound - self.lower_bound) * self.rate


class RebateConfig(ImmutableModel):
    """Flat rebates deducted from computed tax for low chargeable incomes."""

    income_threshold: float
    self_amount: float
    spouse_amount: float

    @model_validator(mode="after")
    def _validate_amounts(self) -> RebateConfig:
        if self.income_threshold < 0:
            raise ConfigurationError("Rebate income threshold must be non-negative")
        if self.self_amount < 0 or self.spouse_amount < 0:
            raise ConfigurationError("Rebate amounts must be non-negative")
        return self


class IncomeTaxConfig(ImmutableModel):
    """Progressive bracket table and rebates for resident individuals."""

    brackets: Sequence[TaxBracket]
    rebates: RebateConfig

    @model_validator(mode="after")
    def _validate_bracket_sequence(self) -> IncomeTaxConfig:
        brackets = self.brackets
        if not brackets:
            raise ConfigurationError("At least one tax bracket must be defined")
        if brackets[0].lower_bound != 0:
            raise ConfigurationError("The first tax bracket must start at zero")
        if brackets[0].base_tax != 0:
            raise ConfigurationError("The first tax bracket must carry no base tax")

        for previous, current in zip(brackets, brackets[1:]):
            if previous.upper_bound is None:
                raise ConfigurationError("Only the final tax bracket may be open-ended")
            if current.lower_bound != previous.upper_bound:
                raise ConfigurationError(
                    "Tax brackets must be contiguous and in ascending order"
                )
            expected = previous.tax_at_upper_bound()
            if expected is not None and abs(current.base_tax - expected) > _BASE_TAX_TOLERANCE:
                raise ConfigurationError(
                    f"Base tax for bracket starting at {current.lower_bound:g} should be "
                    f"{expected:g}, found {current.base_tax:g}"
                )

        if brackets[-1].upper_bound is not None:
            raise ConfigurationError("Final tax bracket must have an open upper bound")
        return self


class ReliefCaps(ImmutableModel):
    """Annual caps for statutory contribution reliefs."""

    epf_annual_cap: float
    socso_eis_annual_cap: float


class DeductionDefaults(ImmutableModel):
    """Default statutory contribution rates (percent) and wage ceilings (RM)."""

    epf_rate: float
    socso_rate: float
    socso_ceiling: float
    eis_rate: float
    eis_ceiling: float


class SuggestedBound(ImmutableModel):
    """Range hint surfaced to forms; never enforced by the calculators."""

    minimum: float = Field(alias="min")
    maximum: float = Field(alias="max")

    @model_validator(mode="after")
    def _validate_range(self) -> SuggestedBound:
        if self.maximum < self.minimum:
            raise ConfigurationError("Suggested bounds must have max >= min")
        return self


class DeductionSection(ImmutableModel):
    """Statutory deduction defaults plus UI bounds."""

    defaults: DeductionDefaults
    suggested_bounds: Mapping[str, SuggestedBound] = Field(default_factory=dict)


class BudgetFormula(ImmutableModel):
    """Needs/wants/savings split expressed in percent of net income."""

    name: str
    needs_pct: float = Field(alias="needs")
    wants_pct: float = Field(alias="wants")
    savings_pct: float = Field(alias="savings")
    custom: bool = False

    @model_validator(mode="after")
    def _validate_split(self) -> Self:
        for value in (self.needs_pct, self.wants_pct, self.savings_pct):
            if value < 0 or value > 100:
                raise ConfigurationError(
                    f"Budget formula '{self.name}' percentages must lie within 0-100"
                )
        total = self.needs_pct + self.wants_pct + self.savings_pct
        if abs(total - 100) > _PERCENT_TOLERANCE:
            raise ConfigurationError(
                f"Budget formula '{self.name}' percentages must sum to 100 (found {total:g})"
            )
        return self


class BudgetConfig(ImmutableModel):
    """Preset budget formulas offered before falling back to a custom split."""

    presets: Sequence[BudgetFormula]

    @field_validator("presets", mode="before")
    @classmethod
    def _coerce_presets(cls, value: Any) -> Sequence[Any]:
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping)):
            return tuple(value)
        raise ConfigurationError("Budget presets must be provided as a list")

    @model_validator(mode="after")
    def _validate_presets(self) -> BudgetConfig:
        if not self.presets:
            raise ConfigurationError("At least one budget preset must be defined")
        return self


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    tax: IncomeTaxConfig
    reliefs: ReliefCaps
    deductions: DeductionSection
    budget: BudgetConfig

    @model_validator(mode="before")
    @classmethod
    def _prepare_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        for section in ("tax", "reliefs", "deductions", "budget"):
            if not isinstance(prepared.get(section), Mapping):
                raise ConfigurationError(f"Configuration requires a '{section}' section")

        return prepared


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported assessment year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "BudgetConfig",
    "BudgetFormula",
    "ConfigurationError",
    "DeductionDefaults",
    "DeductionSection",
    "ImmutableModel",
    "IncomeTaxConfig",
    "RebateConfig",
    "ReliefCaps",
    "SuggestedBound",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
]
