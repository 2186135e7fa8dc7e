from LedgerApp.app.accounting_db import db
from LedgerApp.app.utils.dates import utc_now

class Movement(db.Model):
    __tablename__ = 'movements'
    id = db.Column(db.Integer, primary_key=True)
    entry_id = db.Column(db.Integer, db.ForeignKey('journal_entries.id'), nullable=False)
    account_id = db.Column(db.Integer, db.ForeignKey('accounts.id'), nullable=False)
    debit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    credit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    description = db.Column(db.Text)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    budget_line_id = db.Column(db.Integer, db.ForeignKey('budget_lines.id'))

    created_at = db.Column(db.DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=utc_now)
