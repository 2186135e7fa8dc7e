# LedgerApp/app/models/journal_entry.py

from datetime import date
from LedgerApp.app.accounting_db import db
from LedgerApp.app.utils.dates import utc_now


ENTRY_STATES = ("draft", "applied", "cancelled")
ENTRY_TYPES = ("income", "expense", "journal")


class JournalEntry(db.Model):
    __tablename__ = "journal_entries"
    __table_args__ = (
        db.UniqueConstraint("company_id", "number", name="uq_company_entry_number"),
    )

    id = db.Column(db.Integer, primary_key=True)

    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)

    # Unique per company_id, reserved from CompanySequence
    number = db.Column(db.Integer, nullable=False, index=True)

    date = db.Column(db.Date, default=date.today, nullable=False)
    entry_type = db.Column(db.String(20), nullable=False, default="journal")
    state = db.Column(db.String(20), nullable=False, default="draft")
    observations = db.Column(db.String(500))

    counterparty_id = db.Column(db.Integer)
    cost_center_id = db.Column(db.Integer)

    total_debit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_credit = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=utc_now)
    applied_at = db.Column(db.DateTime(timezone=True))

    company = db.relationship("Company", backref="journal_entries")

    movements = db.relationship(
        "Movement",
        backref="entry",
        cascade="all, delete-orphan",
        lazy=True,
        order_by="Movement.display_order",
    )

    @property
    def is_draft(self):
        return self.state == "draft"

    @property
    def is_applied(self):
        return self.state == "applied"
