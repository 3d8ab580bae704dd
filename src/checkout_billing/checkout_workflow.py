"""Checkout estimate workflow.

A 2-step pipeline that:
1. Validates the raw checkout payload and classifies the charges
2. Calculates patient responsibility (insured) or the discounted cash price (self-pay)

The caller persists the returned result and writes ``deductible_met`` back
to policy storage before running another estimate for the same patient.
Engine settings are read from configs/config.json relative to the working
directory.
"""

import logging
from typing import Annotated, Any, Literal

import pydantic
from pydantic import BaseModel
from workflows import Context, Workflow, step
from workflows.events import Event, StartEvent, StopEvent
from workflows.resource import ResourceConfig

from .config import (
    CONFIG_FILE,
    ClassificationConfig,
    CopayConfig,
    EngineConfig,
    SelfPayConfig,
)
from .engine import (
    calculate_patient_responsibility,
    calculate_self_pay_charges,
    classify_charges,
)
from .errors import ValidationError
from .schemas import ChargeItem, InsurancePolicy

logger = logging.getLogger(__name__)


# --- Events ---


class CheckoutStartEvent(StartEvent):
    """Start event carrying the encounter's charges and the patient's benefits."""

    charges: list[dict[str, Any]]
    policy: dict[str, Any] | None = None
    self_pay: bool = False


class StatusEvent(Event):
    """Progress status update for the client."""

    message: str
    level: Literal["info", "warning", "error"] = "info"


class ChargesPreparedEvent(Event):
    """Emitted after the payload is validated and charges are classified."""

    pass


# --- Workflow State ---


class CheckoutState(BaseModel):
    """State persisted across workflow steps."""

    charges: list[ChargeItem] = []
    policy: InsurancePolicy | None = None
    self_pay: bool = False


# --- Workflow ---


class CheckoutEstimateWorkflow(Workflow):
    """Estimate what a patient owes at checkout."""

    @step()
    async def prepare_charges(
        self,
        event: CheckoutStartEvent,
        ctx: Context[CheckoutState],
        classification_config: Annotated[
            ClassificationConfig,
            ResourceConfig(
                config_file=CONFIG_FILE,
                path_selector="classification",
                label="Charge Classification",
                description="Per-practice CPT code category overrides",
            ),
        ],
    ) -> ChargesPreparedEvent:
        """Parse the payload into schemas and tag each charge with a category."""
        ctx.write_event_to_stream(
            StatusEvent(message=f"Preparing {len(event.charges)} charges...")
        )

        charges, policy = _parse_payload(event.charges, event.policy)
        classified = classify_charges(charges, classification_config.code_overrides)

        async with ctx.store.edit_state() as state:
            state.charges = classified
            state.policy = policy
            state.self_pay = event.self_pay

        return ChargesPreparedEvent()

    @step()
    async def calculate(
        self,
        event: ChargesPreparedEvent,
        ctx: Context[CheckoutState],
        classification_config: Annotated[
            ClassificationConfig,
            ResourceConfig(
                config_file=CONFIG_FILE,
                path_selector="classification",
                label="Charge Classification",
                description="Per-practice CPT code category overrides",
            ),
        ],
        copay_config: Annotated[
            CopayConfig,
            ResourceConfig(
                config_file=CONFIG_FILE,
                path_selector="copay",
                label="Copay Rules",
                description="Whether copays are waived while the deductible is open",
            ),
        ],
        self_pay_config: Annotated[
            SelfPayConfig,
            ResourceConfig(
                config_file=CONFIG_FILE,
                path_selector="self_pay",
                label="Self-Pay Pricing",
                description="Cash-price discount for uninsured checkout",
            ),
        ],
    ) -> StopEvent:
        """Run the billing engine and return the JSON-ready result."""
        state = await ctx.store.get_state()

        if state.self_pay:
            ctx.write_event_to_stream(StatusEvent(message="Calculating self-pay price..."))
            result = calculate_self_pay_charges(
                state.charges, self_pay_config.discount_percent
            )
            return StopEvent(result=result.model_dump(mode="json"))

        ctx.write_event_to_stream(
            StatusEvent(message="Calculating patient responsibility...")
        )
        config = EngineConfig(
            classification=classification_config,
            copay=copay_config,
            self_pay=self_pay_config,
        )
        result = calculate_patient_responsibility(state.charges, state.policy, config)

        if result.estimated_without_insurance:
            ctx.write_event_to_stream(
                StatusEvent(
                    message="Insurance benefits incomplete, estimated as self-pay",
                    level="warning",
                )
            )

        return StopEvent(result=result.model_dump(mode="json"))


# --- Helper Functions ---


def _parse_payload(
    raw_charges: list[dict[str, Any]],
    raw_policy: dict[str, Any] | None,
) -> tuple[list[ChargeItem], InsurancePolicy | None]:
    """Validate raw dicts into schemas, reporting failures as ValidationError."""
    try:
        charges = [ChargeItem.model_validate(raw) for raw in raw_charges]
        policy = InsurancePolicy.model_validate(raw_policy) if raw_policy else None
    except pydantic.ValidationError as exc:
        logger.warning("Rejected checkout payload: %s", exc)
        raise ValidationError(f"Invalid checkout payload: {exc}") from exc
    return charges, policy


workflow = CheckoutEstimateWorkflow(timeout=None)
