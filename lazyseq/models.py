"""
Pydantic models for configuring the batch-parallel dispatcher.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FailurePolicy(str, Enum):
    """How an executor reacts when one unit of work raises."""
    RUN_ALL = "run_all"
    FAIL_FAST = "fail_fast"


class DispatchConfig(BaseModel):
    """Settings for parallel_for_each and its default executor."""
    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(
        default=1,
        ge=1,
        description="Maximum number of elements handled by one unit of work"
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Thread pool size of the default executor"
    )
    failure_policy: FailurePolicy = Field(
        default=FailurePolicy.RUN_ALL,
        description="Whether sibling units keep running after one fails"
    )

    @field_validator('failure_policy', mode='before')
    @classmethod
    def normalize_failure_policy(cls, v):
        """Accept policy names regardless of case or dashes"""
        if isinstance(v, str) and not isinstance(v, FailurePolicy):
            return v.strip().lower().replace('-', '_')
        return v
