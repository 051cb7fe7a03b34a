"""Data models for formula validation."""

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Result of validating a single formula body."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    cell_references: list[str] = Field(default_factory=list)  # Document order, duplicates kept
    functions: list[str] = Field(default_factory=list)  # Upper-cased call names
