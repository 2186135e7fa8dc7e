from LedgerApp.app.accounting_db import db
from LedgerApp.app.models.company_sequence import CompanySequence
import LedgerApp.app.common as common


ENTRY_SEQUENCE = "journal_entry"


def _locked_sequence(company_id: int, name: str):
    return (
        db.session.query(CompanySequence)
        .filter(CompanySequence.company_id == company_id, CompanySequence.name == name)
        .with_for_update()
        .one_or_none()
    )


def reserve_next_number(company_id: int, name: str = ENTRY_SEQUENCE) -> int:
    """
    Allocate the next value of a per-company counter.
    The counter row is locked while it is read and bumped; the caller commits.
    """
    seq = _locked_sequence(company_id, name)
    if seq is None:
        # a concurrent first use fails on uniq_company_sequence_name at flush
        seq = CompanySequence(company_id=company_id, name=name, next_value=1)
        db.session.add(seq)

    value = int(seq.next_value)
    seq.next_value = value + 1
    db.session.flush()

    common.logger.debug(f"Reserved {name} #{value} for company {company_id}")
    return value
