"""Registry of spreadsheet functions the validator recognizes."""

from dataclasses import dataclass, field

# Functions accepted without a warning
DEFAULT_FUNCTIONS = frozenset(
    {
        # Math
        "SUM",
        "SUMIF",
        "SUMIFS",
        "SUMPRODUCT",
        "PRODUCT",
        "AVERAGE",
        "AVERAGEIF",
        "AVERAGEIFS",
        "COUNT",
        "COUNTA",
        "COUNTBLANK",
        "COUNTIF",
        "COUNTIFS",
        "MIN",
        "MAX",
        "ABS",
        "ROUND",
        "ROUNDUP",
        "ROUNDDOWN",
        "INT",
        "FLOOR",
        "CEILING",
        "MOD",
        "POWER",
        "SQRT",
        "LN",
        "LOG",
        "LOG10",
        "EXP",
        "PI",
        "RAND",
        "RANDBETWEEN",
        # Logical
        "IF",
        "IFS",
        "SWITCH",
        "AND",
        "OR",
        "NOT",
        "XOR",
        "TRUE",
        "FALSE",
        "IFERROR",
        "IFNA",
        # Text
        "CONCATENATE",
        "CONCAT",
        "TEXTJOIN",
        "LEFT",
        "RIGHT",
        "MID",
        "LEN",
        "TRIM",
        "UPPER",
        "LOWER",
        "PROPER",
        "SUBSTITUTE",
        "REPLACE",
        "FIND",
        "SEARCH",
        "TEXT",
        "VALUE",
        # Information
        "ISNUMBER",
        "ISTEXT",
        "ISBLANK",
        "ISERROR",
        # Date and time
        "TODAY",
        "NOW",
        "DATE",
        "YEAR",
        "MONTH",
        "DAY",
        "WEEKDAY",
        "DATEDIF",
        "DAYS",
        "NETWORKDAYS",
        "EOMONTH",
        # Lookup and reference
        "VLOOKUP",
        "HLOOKUP",
        "XLOOKUP",
        "INDEX",
        "MATCH",
        "CHOOSE",
        "INDIRECT",
        "OFFSET",
        "ROW",
        "COLUMN",
        # Statistical
        "MEDIAN",
        "MODE",
        "STDEV",
        "STDEVP",
        "VAR",
        "VARP",
        "RANK",
        "PERCENTILE",
        "LARGE",
        "SMALL",
        # Financial
        "PMT",
        "FV",
        "PV",
        "RATE",
        "NPV",
        "IRR",
    }
)


@dataclass(frozen=True)
class FunctionRegistry:
    """Immutable set of recognized function names."""

    names: frozenset[str] = field(default=DEFAULT_FUNCTIONS)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self.names

    def __len__(self) -> int:
        return len(self.names)

    def with_functions(self, *names: str) -> "FunctionRegistry":
        """Return a new registry that also recognizes ``names``."""
        return FunctionRegistry(self.names | {n.upper() for n in names})


DEFAULT_REGISTRY = FunctionRegistry()
