"""
Structured model outputs.

Every model answer the pipeline depends on is parsed into one of these
pydantic models. A schema mismatch is an error, never a guess.
"""

import json
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, RootModel, field_validator

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class Category(str, Enum):
    """The closed set of email categories."""

    ANSWERS = "Answers"
    NOMINATIONS = "Nominations"
    QUESTIONS = "Questions"
    UNSUBSCRIBE = "Unsubscribe request"
    ACKNOWLEDGMENT = "Acknowledgment"
    CONFIRMATION = "Confirmation"
    DECLINE = "Decline to Participate"
    SPAM_OR_PROMOTION = "Spam or Promotion"


class CategoryDecision(BaseModel):
    """Classifier output: a category label and the reasoning behind it."""

    model_config = ConfigDict(extra="ignore")

    category: str
    explanation: str


class GeneratedReply(BaseModel):
    """Reply drafted for the sender."""

    model_config = ConfigDict(extra="ignore")

    subject: str
    message: str

    def as_text(self) -> str:
        return (
            f"Generated subject for this email:\n{self.subject}\n"
            f"Generated response for this email:\n{self.message}"
        )


class QAPair(BaseModel):
    """One interview question and the sender's answer."""

    model_config = ConfigDict(extra="ignore")

    q: str
    a: str


class _BlankStrings(BaseModel):
    """Base for extraction records where the model may answer null for unknown fields."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def none_to_blank(cls, value):
        return "" if value is None else value


class BusinessDetails(_BlankStrings):
    """Details of the business that wrote the email."""

    senderName: str = ""
    senderGender: str = ""
    senderTitle: str = ""
    businessName: str = ""
    address: str = ""
    town: str = ""
    phoneNumber: str = ""
    website: str = ""
    facebook: str = ""
    twitter: str = ""
    instagram: str = ""
    linkedin: str = ""


class InvitationLetter(BaseModel):
    """Invitation to interview sent to a nominated business."""

    subject: str
    message: str


class Nomination(_BlankStrings):
    """A business nominated to be featured next."""

    nominated_business_name: str = ""
    nominated_business_location: str = ""
    nominated_business_person: str = ""
    nominated_business_link: str = ""
    email_template: InvitationLetter | str = ""

    @property
    def is_blank(self) -> bool:
        """True if the model left every field of this slot empty."""
        return not any(
            [
                self.nominated_business_name,
                self.nominated_business_location,
                self.nominated_business_person,
                self.nominated_business_link,
                self.email_template,
            ]
        )


class Nominations(RootModel[dict[str, Nomination]]):
    """Nominees keyed by position: "0", "1", ..."""

    @property
    def is_blank(self) -> bool:
        return all(nomination.is_blank for nomination in self.root.values())

    def items(self):
        return self.root.items()

    def __len__(self) -> int:
        return len(self.root)


def extract_json(text: str) -> str:
    """Strip markdown code fences around a JSON answer."""
    text = text.strip()
    if "```json" in text:
        start = text.find("```json") + 7
        end = text.find("```", start)
        return text[start:end].strip()
    if text.startswith("```"):
        start = text.find("```") + 3
        end = text.find("```", start)
        return text[start:end].strip()
    return text


def parse_model_output(text: str, schema: type[SchemaT]) -> SchemaT:
    """
    Parse a model answer into a schema.

    Raises:
        pydantic.ValidationError: If the answer is not valid JSON for the schema.
    """
    return schema.model_validate_json(extract_json(text))


def to_json(value: BaseModel | dict | list) -> str:
    """Serialize a model or plain structure for a result bundle."""
    if isinstance(value, BaseModel):
        return value.model_dump_json(indent=2)
    return json.dumps(value, indent=2, ensure_ascii=False)
