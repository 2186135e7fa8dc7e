from LedgerApp.app.accounting_db import db
from LedgerApp.app.utils.dates import utc_now


class CompanySequence(db.Model):
    """
    Per-company counters for sequential identifiers (entry numbers).

    Only services/sequences.py writes to this table.
    """
    __tablename__ = 'company_sequences'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    next_value = db.Column(db.BigInteger, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    __table_args__ = (
        db.UniqueConstraint("company_id", "name", name="uniq_company_sequence_name"),
    )

    def __repr__(self):
        return f"<CompanySequence {self.company_id}:{self.name}={self.next_value}>"
