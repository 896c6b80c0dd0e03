import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class SourceType(str, Enum):
    CHAT = "WhatsApp"
    EMAIL = "Email"
    OTHER = "Altro"


class ContextType(str, Enum):
    FAMILY = "famiglia"
    UNIVERSITY = "università"
    WORK = "lavoro"
    GYM = "palestra"
    SALES = "vendite"
    OTHER = "altro"


class Priority(str, Enum):
    HIGH = "Alta"
    MEDIUM = "Media"
    LOW = "Bassa"


class TaskTag(str, Enum):
    CALL = "call"
    EMAIL = "email"
    DOCUMENTS = "documenti"
    UNIVERSITY = "università"
    APPOINTMENT = "appuntamento"
    PAYMENT = "pagamento"
    REPLY = "risposta"
    OTHER = "altro"


class Tone(str, Enum):
    FORMAL = "formale"
    CORDIAL = "cordiale"
    TERSE = "sintetica"


CONTEXT_LABELS: dict[ContextType, str] = {
    ContextType.FAMILY: "Famiglia",
    ContextType.UNIVERSITY: "Università",
    ContextType.WORK: "Lavoro",
    ContextType.GYM: "Palestra",
    ContextType.SALES: "Vendite",
    ContextType.OTHER: "Altro",
}

SOURCE_LABELS: dict[SourceType, str] = {
    SourceType.CHAT: "WhatsApp",
    SourceType.EMAIL: "Email",
    SourceType.OTHER: "Altro",
}


def generate_id() -> str:
    return str(uuid.uuid4())


class Task(BaseModel):
    id: str = Field(default_factory=generate_id)
    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    due_date_reason: str | None = None
    tags: list[TaskTag] = Field(min_length=1)


class Replies(BaseModel):
    formal: str
    cordial: str
    terse: str

    def for_tone(self, tone: Tone) -> str:
        return {
            Tone.FORMAL: self.formal,
            Tone.CORDIAL: self.cordial,
            Tone.TERSE: self.terse,
        }[tone]


class CalendarEvent(BaseModel):
    title: str
    start_date: datetime
    end_date: datetime
    location: str | None = None
    notes: str = ""
    is_confirmed: bool = False

    @model_validator(mode="after")
    def _end_after_start(self) -> "CalendarEvent":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class NextStep(BaseModel):
    action: str
    checklist: list[str] = Field(default_factory=list, max_length=3)


class AnalysisInput(BaseModel):
    raw_text: str = Field(min_length=1)
    source_type: SourceType = SourceType.OTHER
    context_type: ContextType = ContextType.OTHER
    person_name: str | None = None
    role: str | None = None

    @field_validator("raw_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Il messaggio non può essere vuoto")
        return value

    @field_validator("person_name", "role")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class AnalysisResult(BaseModel):
    tasks: list[Task]
    replies: Replies
    event: CalendarEvent | None = None
    next_step: NextStep


class AnalysisRecord(BaseModel):
    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    input: AnalysisInput
    result: AnalysisResult
