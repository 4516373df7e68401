"""
Execution context handed to a job by its scheduler.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models.runtime import ExecutionResult


@dataclass
class JobExecutionContext:
    """
    Parameters in, result out, for one job execution.

    ``result`` is the numeric exit code and is set as soon as a launched
    process exits, whether the execution then succeeds or fails.
    ``execution_result`` additionally carries the captured output.
    """

    merged_job_data_map: Dict[str, str] = field(default_factory=dict)
    job_key: str = "localexec.command"
    result: Optional[int] = None
    execution_result: Optional[ExecutionResult] = None
