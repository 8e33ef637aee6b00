"""
Generative-text helpers backed by OpenAI Structured Outputs

Each flow sends a prompt built from typed input and asks for a response that
matches a strict JSON schema derived from a pydantic output model. Responses
are validated again on our side; anything that does not match raises
GenerationError.
"""

import json
import logging
from datetime import date
from typing import Any, Dict, Optional, Type, TypeVar

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import COMPANY_NAME, OPENAI_API_KEY, OPENAI_MODEL
from ..constants import StaffType

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class AIServiceError(Exception):
    """Base error for the generative-text boundary"""


class AINotConfiguredError(AIServiceError):
    """OPENAI_API_KEY is not set"""


class GenerationError(AIServiceError):
    """The model call failed or its output did not match the schema"""


# Output models; strict mode needs additionalProperties: false (extra="forbid")


class WaiterSuggestion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    waiterCount: int = Field(..., description="The suggested number of waiters.")
    reasoning: str = Field(..., description="The reasoning behind the suggestion.")

    @field_validator("waiterCount")
    @classmethod
    def at_least_one(cls, v):
        if v < 1:
            raise ValueError("waiterCount must be at least 1")
        return v


class AgreementDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    agreementText: str = Field(
        ..., description="The full, formally formatted text of the employment agreement."
    )


class InvoiceNotes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    summary: str = Field(..., description="A short cover note for the client.")


class AgreementInput(BaseModel):
    staffName: str
    staffAddress: str
    staffRole: str
    staffType: str
    idNumber: str
    bankAccountNumber: Optional[str] = None
    bankIfscCode: Optional[str] = None
    compensationAmount: Optional[float] = None
    compensationType: str  # "monthly salary" | "per event charge"


SUGGEST_WAITERS_PROMPT = """You are an expert event staffing planner. Based on the number of attendees, suggest an appropriate number of waiters.

A good rule of thumb is 1 waiter for every 25 guests for a standard buffet, and 1 for every 15 for a plated dinner. Assume a standard event unless details suggest otherwise. Provide a brief reasoning for your suggestion.
"""

AGREEMENT_PROMPT = """You are a legal assistant drafting employment contracts for an event staffing company called "{company}".

Rules:
- The agreement is dated {current_date}.
- The parties are "{company}" (the Company) and the staff member.
- List the staff member's personal and banking details in an itemized section.
- State the position/role and the compensation (amount and type).
- Include clauses for duties, term of employment (at-will), confidentiality, termination and governing law (India).
- Start with the title "Employment Agreement". Output only the agreement text.
"""

INVOICE_NOTES_PROMPT = """You write short, polite cover notes for catering invoices sent by "{company}".

Rules:
- Two to four sentences.
- Mention the event date and the total amount exactly as given.
- Do not invent charges, discounts or payment terms.
"""


def get_openai_client() -> OpenAI:
    if not OPENAI_API_KEY:
        raise AINotConfiguredError("OPENAI_API_KEY is not configured")
    return OpenAI(api_key=OPENAI_API_KEY)


def build_response_format(model: Type[BaseModel], name: str) -> Dict[str, Any]:
    """Structured Outputs wrapper for a pydantic output model"""
    schema = model.model_json_schema()
    schema["required"] = list(schema.get("properties", {}).keys())
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "schema": schema, "strict": True},
    }


def _generate(output_model: Type[T], name: str, system_prompt: str, user_content: str) -> T:
    client = get_openai_client()
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]

    try:
        response = client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=messages,
            response_format=build_response_format(output_model, name),
            temperature=0.2,
        )
    except OpenAIError as e:
        logger.error(f"❌ OpenAI API error in {name}: {e}")
        raise GenerationError("The AI service request failed") from e

    raw = response.choices[0].message.content
    if not raw:
        logger.error(f"❌ Empty model response in {name}")
        raise GenerationError("Empty model response")

    try:
        return output_model.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        logger.error(f"❌ Model returned invalid JSON in {name}: {e}")
        raise GenerationError("Model returned invalid JSON") from e
    except ValidationError as e:
        logger.error(f"❌ {name} output validation failed: {e}")
        raise GenerationError("Model output did not match the expected schema") from e


def suggest_waiters(attendees: int) -> WaiterSuggestion:
    logger.info(f"Suggesting waiter count for {attendees} attendees")
    return _generate(
        WaiterSuggestion,
        "waiter_suggestion",
        SUGGEST_WAITERS_PROMPT,
        f"Number of Attendees: {attendees}",
    )


def agreement_input_for(staff) -> AgreementInput:
    """Agreement input from a staff record; salaried staff are paid monthly"""
    salaried = staff.staff_type == StaffType.SALARIED.value
    return AgreementInput(
        staffName=staff.name,
        staffAddress=staff.address or "Not provided",
        staffRole=staff.role,
        staffType=staff.staff_type,
        idNumber=staff.id_number or "Not provided",
        bankAccountNumber=staff.bank_account_number,
        bankIfscCode=staff.bank_ifsc_code,
        compensationAmount=staff.monthly_salary if salaried else staff.per_event_charge,
        compensationType="monthly salary" if salaried else "per event charge",
    )


def generate_agreement(data: AgreementInput, today: Optional[date] = None) -> AgreementDraft:
    current_date = (today or date.today()).isoformat()
    prompt = AGREEMENT_PROMPT.format(company=COMPANY_NAME, current_date=current_date)
    details = "\n".join(
        [
            f"- Name: {data.staffName}",
            f"- Address: {data.staffAddress}",
            f"- Role: {data.staffRole}",
            f"- Staff Type: {data.staffType}",
            f"- ID Number: {data.idNumber}",
            f"- Bank Account: {data.bankAccountNumber or 'Not provided'}",
            f"- IFSC Code: {data.bankIfscCode or 'Not provided'}",
            f"- Compensation: ₹{data.compensationAmount or 0} ({data.compensationType})",
        ]
    )
    logger.info(f"Drafting agreement for {data.staffName}")
    return _generate(AgreementDraft, "agreement_draft", prompt, f"STAFF MEMBER DATA:\n{details}")


def draft_invoice_notes(invoice) -> InvoiceNotes:
    """Cover note for a generated invoice; amounts are passed in, never computed by the model"""
    client = invoice.client or {}
    lines = [f"- {item['description']}: ₹{item['amount']:.2f}" for item in invoice.line_items or []]
    content = "\n".join(
        [
            f"Invoice: {invoice.invoice_number}",
            f"Client: {client.get('companyName') or client.get('name')}",
            f"Event date: {invoice.event_date}",
            "Line items:",
            *lines,
            f"GST ({invoice.gst_rate:g}%): ₹{invoice.gst_amount:.2f}",
            f"Total: ₹{invoice.total_amount:.2f}",
        ]
    )
    logger.info(f"Drafting notes for invoice {invoice.invoice_number}")
    return _generate(
        InvoiceNotes,
        "invoice_notes",
        INVOICE_NOTES_PROMPT.format(company=COMPANY_NAME),
        content,
    )
