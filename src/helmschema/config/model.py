from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from helmschema.schema.options import SkipAutoGeneration, SynthesisOptions


class GenerateConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    chart_search_root: str = Field(default=".", alias="chart-search-root")
    value_files: list[str] = Field(default_factory=lambda: ["values.yaml"], alias="value-files")
    output_file: str = Field(default="values.schema.json", alias="output-file")
    dry_run: bool = Field(default=False, alias="dry-run")
    no_dependencies: bool = Field(default=False, alias="no-dependencies")
    use_references: bool = Field(default=False, alias="use-references")
    keep_full_comment: bool = Field(default=False, alias="keep-full-comment")
    helm_docs_compatibility_mode: bool = Field(default=False, alias="helm-docs-compatibility-mode")
    dont_strip_helm_docs_prefix: bool = Field(default=False, alias="dont-strip-helm-docs-prefix")
    skip_auto_generation: list[str] = Field(default_factory=list, alias="skip-auto-generation")
    workers: int | None = Field(default=None, ge=1)

    @field_validator("value_files", "skip_auto_generation", mode="before")
    @classmethod
    def _split_commas(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            return [part.strip() for item in value for part in str(item).split(",") if part.strip()]
        return value

    @field_validator("skip_auto_generation")
    @classmethod
    def _validate_skip_fields(cls, value: list[str]) -> list[str]:
        SkipAutoGeneration.from_fields(value)
        return value

    @field_validator("value_files")
    @classmethod
    def _validate_value_files(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one values file name is required.")
        return value

    def synthesis_options(self) -> SynthesisOptions:
        return SynthesisOptions(
            keep_full_comment=self.keep_full_comment,
            helm_docs_compatibility_mode=self.helm_docs_compatibility_mode,
            dont_strip_helm_docs_prefix=self.dont_strip_helm_docs_prefix,
            skip=SkipAutoGeneration.from_fields(self.skip_auto_generation),
        )
