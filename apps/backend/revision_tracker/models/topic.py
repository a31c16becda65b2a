from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..topic_row import RevisionStatus


class UpdateStatusRequest(BaseModel):
    """Request model for marking a topic revised / not revised.

    - rowIndex: 0 始まりのデータ行番号（シート上は rowIndex + 2 行目）
    - newStatus: "Revised" または "Not Revised"
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"examples": [{"rowIndex": 0, "newStatus": "Revised"}]},
    )

    row_index: int = Field(alias="rowIndex", ge=0)
    new_status: RevisionStatus = Field(alias="newStatus")


class UpdateStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    status: str
    last_revised_date: str = Field(alias="lastRevisedDate")
    next_due_date: str = Field(alias="nextDueDate")


class AddTopicRequest(BaseModel):
    """Request model for appending a new topic row.

    dateStudied は `YYYY-MM-DD` を想定するが、シートへはそのまま書き込む。
    形式が不正な行は期日判定の対象外になる。
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "subject": "Math",
                    "topic": "Algebra",
                    "notes": "chapter 3",
                    "dateStudied": "2024-01-10",
                }
            ]
        },
    )

    subject: str = Field(min_length=1, max_length=200)
    topic: str = Field(min_length=1, max_length=500)
    notes: str = Field(default="", max_length=5000)
    date_studied: str = Field(alias="dateStudied", max_length=32)

    @field_validator("subject", "topic", "notes", "date_studied", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class AddTopicResponse(BaseModel):
    success: bool = True
    row: list[str]
