from pydantic import BaseModel, model_validator
from typing import Optional
from enum import Enum
from lostfound.reports.schemas import Report


class ModerationAction(str, Enum):
    approve = "approve"
    reject = "reject"


class AdminCheck(BaseModel):
    isAdmin: bool
    role: Optional[str] = None
    adminSince: Optional[str] = None


class ModerationRequest(BaseModel):
    action: ModerationAction
    rejection_reason: Optional[str] = None

    @model_validator(mode="after")
    def strip_reason(self):
        if self.rejection_reason is not None:
            self.rejection_reason = self.rejection_reason.strip() or None
        if self.action == ModerationAction.approve:
            self.rejection_reason = None
        return self


class ModerationResult(BaseModel):
    success: bool = True
    report: Report
    notified: bool = False
