"""Documentation requirements for minors.

Each rule distinguishes a document that is missing, expired or revoked in
its failure detail (``checked_values["reason"]``); all three roll up to a
single ``fail``. Only the work permit expires for compliance purposes;
consent and safety training count while they are on file and not revoked.
"""

from __future__ import annotations

from datetime import date

from labor_engine.compliance import messages
from labor_engine.compliance.rules.base import ComplianceRule
from labor_engine.compliance.types import (
    ComplianceContext,
    DocumentSnapshot,
    DocumentType,
    RuleCategory,
    RuleResult,
)
from labor_engine.utils.age import MINOR_BANDS, AgeBand

PERMIT_BANDS = frozenset({AgeBand.AGES_14_15, AgeBand.AGES_16_17})

MISSING = "missing"
EXPIRED = "expired"
REVOKED = "revoked"


def document_status(
    documents: list[DocumentSnapshot],
    check_date: date,
    check_expiry: bool = True,
) -> tuple[DocumentSnapshot | None, str | None]:
    """Find a valid document, or explain why none is valid.

    Returns:
        (valid_document, None) when one is valid, otherwise (None, reason)
        where reason is the most specific of expired, revoked, missing
    """
    if not documents:
        return None, MISSING

    active = [doc for doc in documents if not doc.is_revoked]
    if check_expiry:
        valid = [doc for doc in active if not doc.is_expired(check_date)]
    else:
        valid = active

    if valid:
        return max(valid, key=_document_order), None
    if active:
        return None, EXPIRED
    return None, REVOKED


def _document_order(doc: DocumentSnapshot) -> tuple:
    return (doc.expires_at or date.max, doc.uploaded_at is not None, doc.uploaded_at)


def _latest_expiry(documents: list[DocumentSnapshot]) -> date | None:
    expiries = [doc.expires_at for doc in documents if doc.expires_at and not doc.is_revoked]
    return max(expiries, default=None)


class RequiredDocumentRule(ComplianceRule):
    """A valid document of a given type must be on file for the covered bands."""

    category = RuleCategory.DOCUMENTATION

    def __init__(
        self,
        rule_id: str,
        name: str,
        document_type: DocumentType,
        bands: frozenset[AgeBand] = MINOR_BANDS,
        check_expiry: bool = True,
    ):
        self.rule_id = rule_id
        self.name = name
        self.document_type = document_type
        self.age_bands = bands
        self.check_expiry = check_expiry
        self.description = (
            f"{messages.DOCUMENT_LABELS[document_type.value]} must be on file for ages "
            + ", ".join(sorted(band.value for band in bands))
        )

    def covered_days(self, context: ComplianceContext) -> list[date]:
        return [d for d in context.week_dates if context.daily_age_bands[d] in self.age_bands]

    def missing_message(self, context: ComplianceContext) -> str:
        return messages.document_missing(self.document_type.value, context.employee.name)

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        if not self.covered_days(context):
            return self.not_applicable("Employee is not in a covered age band this week")

        documents = context.documents_of_type(self.document_type)
        valid, reason = document_status(documents, context.check_date, self.check_expiry)
        checked = {
            "documentType": self.document_type,
            "documentsOnFile": len(documents),
            "checkDate": context.check_date,
        }

        if valid is not None:
            return self.passed(
                checked_values={**checked, "documentId": valid.document_id},
                actual_value=valid.document_id,
            )

        checked["reason"] = reason
        if reason == EXPIRED:
            expires_at = _latest_expiry(documents)
            message = messages.document_expired(self.document_type.value, expires_at)
            actual = expires_at
        elif reason == REVOKED:
            message = messages.document_revoked(self.document_type.value)
            actual = REVOKED
        else:
            message = self.missing_message(context)
            actual = None

        return self.failed(
            message,
            messages.DOCUMENT_REMEDIATION[self.document_type.value],
            checked_values=checked,
            actual_value=actual,
            affected_dates=self.covered_days(context),
        )


class WorkPermitRule(RequiredDocumentRule):
    """Work permit on file for ages 14-17; expiry is checked separately."""

    def __init__(self):
        super().__init__(
            "RULE-027",
            "Work Permit Required (Ages 14-17)",
            DocumentType.WORK_PERMIT,
            bands=PERMIT_BANDS,
            check_expiry=False,
        )

    def missing_message(self, context: ComplianceContext) -> str:
        age = max(context.daily_ages[d] for d in self.covered_days(context))
        return messages.work_permit_missing(age)


class WorkPermitExpiryRule(ComplianceRule):
    """The work permit on file must not have expired as of the check date."""

    rule_id = "RULE-028"
    name = "Work Permit Not Expired"
    category = RuleCategory.DOCUMENTATION
    description = "Work permit must not be expired"
    age_bands = PERMIT_BANDS

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        permits = [
            doc
            for doc in context.documents_of_type(DocumentType.WORK_PERMIT)
            if not doc.is_revoked
        ]
        if not permits:
            return self.not_applicable("No work permit on file")

        current = [doc for doc in permits if not doc.is_expired(context.check_date)]
        checked = {"checkDate": context.check_date, "permitsOnFile": len(permits)}
        if current:
            return self.passed(
                checked_values=checked,
                actual_value=max(current, key=_document_order).expires_at,
            )

        expires_at = _latest_expiry(permits)
        return self.failed(
            messages.document_expired(DocumentType.WORK_PERMIT.value, expires_at),
            messages.DOCUMENT_REMEDIATION[DocumentType.WORK_PERMIT.value],
            checked_values={**checked, "reason": EXPIRED},
            threshold=context.check_date,
            actual_value=expires_at,
        )


class ConsentNotRevokedRule(ComplianceRule):
    """A revoked parental consent blocks submission until a new one is on file."""

    rule_id = "RULE-007"
    name = "Parental Consent Not Revoked"
    category = RuleCategory.DOCUMENTATION
    description = "Parental consent must not be revoked"
    age_bands = MINOR_BANDS

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        if not context.has_minor_days:
            return self.not_applicable("Employee is an adult for the entire week")

        consents = context.documents_of_type(DocumentType.PARENTAL_CONSENT)
        revoked = [doc for doc in consents if doc.is_revoked]
        active = [doc for doc in consents if not doc.is_revoked]
        checked = {"revokedConsents": len(revoked), "activeConsents": len(active)}

        if revoked and not active:
            return self.failed(
                messages.document_revoked(DocumentType.PARENTAL_CONSENT.value),
                messages.DOCUMENT_REMEDIATION[DocumentType.PARENTAL_CONSENT.value],
                checked_values={**checked, "reason": REVOKED},
                actual_value=REVOKED,
            )
        return self.passed(checked_values=checked)


DOCUMENTATION_RULES: tuple[ComplianceRule, ...] = (
    RequiredDocumentRule(
        "RULE-001",
        "Parental Consent Required",
        DocumentType.PARENTAL_CONSENT,
        check_expiry=False,
    ),
    ConsentNotRevokedRule(),
    WorkPermitRule(),
    WorkPermitExpiryRule(),
    RequiredDocumentRule(
        "RULE-030",
        "Safety Training Required",
        DocumentType.SAFETY_TRAINING,
        check_expiry=False,
    ),
)
