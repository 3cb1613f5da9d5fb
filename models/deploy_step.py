from typing import List, Optional

from pydantic import BaseModel


class StepResult(BaseModel):
    command: List[str]
    output: str = ""
    # None when the process could not be spawned or was killed on timeout
    returncode: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0
