"""Aggregation of waterfall, copay and coinsurance into a CalculationResult."""

from collections.abc import Sequence
from decimal import Decimal

from ..money import ZERO, format_currency
from ..schemas.charges import EncounterCharges
from ..schemas.policy import InsurancePolicy
from ..schemas.result import (
    CalculationResult,
    CategoryBreakdown,
    CoinsuranceSplit,
    CopayDetails,
    DeductibleAllocation,
    LineItemBreakdown,
)
from .coinsurance import apportion
from .deductible import distribute_to_lines, total_consumed
from .hsa import hsa_eligible_amount, is_hsa_eligible


def _sum(values) -> Decimal:
    return sum(values, ZERO)


def build_line_items(
    encounter: EncounterCharges,
    allocations: Sequence[DeductibleAllocation],
    copay: CopayDetails,
    categories: Sequence[CategoryBreakdown],
    policy: InsurancePolicy | None,
) -> list[LineItemBreakdown]:
    """Attribute deductible, copay and coinsurance to individual lines.

    Deductible and copay fill lines in order. The category's rounded
    coinsurance is apportioned by each line's coinsurable amount, so line
    values always sum to the category breakdown.
    """
    applied_by_category = {a.category: a.applied for a in allocations}
    breakdown_by_category = {c.category: c for c in categories}
    percent = policy.coinsurance_percent if policy is not None else None
    hsa = is_hsa_eligible(policy)
    line_items: list[LineItemBreakdown] = []

    for category in encounter.categories:
        lines = encounter.lines(category)
        deductible_shares = distribute_to_lines(applied_by_category.get(category, ZERO), lines)
        after_deductible = [line.line_total - d for line, d in zip(lines, deductible_shares)]

        copay_amount = copay.amount if copay.category == category else ZERO
        copay_shares: list[Decimal] = []
        left = copay_amount
        for available in after_deductible:
            share = min(available, left)
            copay_shares.append(share)
            left -= share

        coinsurable = [a - c for a, c in zip(after_deductible, copay_shares)]
        category_breakdown = breakdown_by_category.get(category)
        category_patient = category_breakdown.coinsurance_patient if category_breakdown else ZERO
        patient_shares = apportion(category_patient, coinsurable)

        for line, deductible, copay_share, line_coinsurable, patient_share in zip(
            lines, deductible_shares, copay_shares, coinsurable, patient_shares
        ):
            insurance_share = line_coinsurable - patient_share
            notes = [f"Fee: {format_currency(line.line_total)}"]
            if deductible > ZERO:
                notes.append(f"Deductible applied: {format_currency(deductible)}")
            if copay_share > ZERO:
                notes.append(f"{copay.copay_type.value.title()} copay: {format_currency(copay_share)}")
            if patient_share > ZERO:
                notes.append(f"{percent:g}% coinsurance: {format_currency(patient_share)}")
            if insurance_share > ZERO:
                notes.append(f"Insurance pays: {format_currency(insurance_share)}")

            line_items.append(
                LineItemBreakdown(
                    code=line.code,
                    description=line.description,
                    origin=line.origin,
                    category=category,
                    quantity=line.quantity,
                    unit_amount=line.amount,
                    charged=line.line_total,
                    deductible_applied=deductible,
                    copay_applied=copay_share,
                    coinsurable=line_coinsurable,
                    coinsurance_patient=patient_share,
                    coinsurance_insurance=insurance_share,
                    patient_total=deductible + copay_share + patient_share,
                    insurance_total=insurance_share,
                    applied_to_deductible=deductible > ZERO,
                    hsa_eligible=hsa,
                    notes=notes,
                )
            )

    return line_items


def build_category_breakdown(
    allocation: DeductibleAllocation,
    copay_applied: Decimal,
    split: CoinsuranceSplit,
) -> CategoryBreakdown:
    patient_total = allocation.applied + copay_applied + split.patient
    return CategoryBreakdown(
        category=allocation.category,
        category_label=allocation.category_label,
        charged=allocation.charged,
        deductible_applied=allocation.applied,
        copay_applied=copay_applied,
        coinsurance_patient=split.patient,
        coinsurance_insurance=split.insurance,
        patient_total=patient_total,
        insurance_total=split.insurance,
    )


def build_calculation_result(
    encounter: EncounterCharges,
    policy: InsurancePolicy,
    allocations: Sequence[DeductibleAllocation],
    copay: CopayDetails,
    categories: Sequence[CategoryBreakdown],
) -> CalculationResult:
    """Total the category breakdowns and advance the deductible accumulator.

    Totals are plain sums of the already-rounded category values.
    """
    consumed = total_consumed(allocations)
    deductible_total = policy.deductible_total or ZERO
    met_before = policy.deductible_met or ZERO
    met_after = min(met_before + consumed, deductible_total)

    total_patient = _sum(c.patient_total for c in categories)
    total_coinsurance_patient = _sum(c.coinsurance_patient for c in categories)

    summary: list[str] = []
    if copay.waived:
        summary.append("Deductible not yet met - charges applied to deductible first")
    elif copay.amount > ZERO:
        summary.append(
            f"{copay.copay_type.value.title()} copay of {format_currency(copay.amount)} collected"
        )
    if consumed > ZERO:
        summary.append(f"{format_currency(consumed)} applied to deductible")
        summary.append(
            f"Deductible remaining after visit: {format_currency(deductible_total - met_after)}"
        )
    if total_coinsurance_patient > ZERO:
        summary.append(
            f"Patient coinsurance ({policy.coinsurance_percent:g}%): "
            f"{format_currency(total_coinsurance_patient)}"
        )
    hsa_amount = hsa_eligible_amount(policy, total_patient)
    if is_hsa_eligible(policy):
        summary.append(f"HSA-eligible amount: {format_currency(hsa_amount)}")

    return CalculationResult(
        categories=list(categories),
        line_items=build_line_items(encounter, allocations, copay, categories, policy),
        deductible_waterfall=list(allocations),
        copay=copay,
        total_charged=_sum(c.charged for c in categories),
        total_deductible_applied=consumed,
        total_copay=_sum(c.copay_applied for c in categories),
        total_coinsurance_patient=total_coinsurance_patient,
        total_coinsurance_insurance=_sum(c.coinsurance_insurance for c in categories),
        total_patient=total_patient,
        total_insurance=_sum(c.insurance_total for c in categories),
        deductible_total=deductible_total,
        deductible_met_before=met_before,
        deductible_met=met_after,
        deductible_remaining=deductible_total - met_after,
        hsa_eligible=is_hsa_eligible(policy),
        hsa_eligible_amount=hsa_amount,
        summary=summary,
    )


def build_uninsured_estimate(
    encounter: EncounterCharges,
    policy: InsurancePolicy | None,
    reason: str,
) -> CalculationResult:
    """Full patient responsibility, used when benefits are unavailable."""
    categories = [
        CategoryBreakdown(
            category=category,
            category_label=category.label,
            charged=encounter.total(category),
            patient_total=encounter.total(category),
        )
        for category in encounter.categories
    ]
    hsa = is_hsa_eligible(policy)
    line_items = [
        LineItemBreakdown(
            code=line.code,
            description=line.description,
            origin=line.origin,
            category=line.category,
            quantity=line.quantity,
            unit_amount=line.amount,
            charged=line.line_total,
            patient_total=line.line_total,
            hsa_eligible=hsa,
            notes=[f"Fee: {format_currency(line.line_total)}", "Estimated without insurance"],
        )
        for line in encounter.items
    ]
    total = _sum(c.charged for c in categories)

    return CalculationResult(
        categories=categories,
        line_items=line_items,
        copay=CopayDetails(reason="Copay not applied - insurance benefits unavailable"),
        total_charged=total,
        total_patient=total,
        deductible_total=policy.deductible_total if policy else None,
        deductible_met_before=policy.deductible_met if policy else None,
        deductible_met=policy.deductible_met if policy else None,
        hsa_eligible=hsa,
        hsa_eligible_amount=hsa_eligible_amount(policy, total),
        estimated_without_insurance=True,
        summary=[reason, f"Estimated patient responsibility: {format_currency(total)}"],
    )
