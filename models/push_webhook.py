from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class Repository(BaseModel):
    full_name: str = ""


class Actor(BaseModel):
    display_name: str = ""
    username: str = ""

    @property
    def display(self) -> str:
        return f"{self.display_name} <{self.username}>"


class BranchTarget(BaseModel):
    type: str
    name: str


class CommitAuthor(BaseModel):
    raw: str = ""


class CommitRecord(BaseModel):
    type: str = ""
    author: CommitAuthor = CommitAuthor()
    message: str = ""
    # only commits on the tracked branch need a date
    date: Optional[datetime] = None


class BranchChange(BaseModel):
    # 'new' is null when the push deleted the branch
    new: Optional[BranchTarget] = None
    commits: List[CommitRecord] = []

    def targets(self, branch: str) -> bool:
        return self.new is not None and self.new.type == "branch" and self.new.name == branch


class Push(BaseModel):
    changes: List[BranchChange] = []


class PushNotification(BaseModel):
    repository: Repository
    actor: Actor
    push: Push


class QualifyingCommit(BaseModel):
    author: str
    message: str
    date: str
