from LedgerApp.app.accounting_db import db
from LedgerApp.app.utils.dates import utc_now


FREQUENCIES = ("weekly", "monthly", "bimonthly", "quarterly", "semiannual", "annual")


class BudgetLine(db.Model):
    __tablename__ = 'budget_lines'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    account_id = db.Column(db.Integer, db.ForeignKey('accounts.id'))

    counterparty_id = db.Column(db.Integer)
    cost_center_id = db.Column(db.Integer)

    description = db.Column(db.String(200), nullable=False)  # the "partida"
    quantity = db.Column(db.Numeric(14, 4), nullable=False, default=1)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    frequency = db.Column(db.String(20), nullable=False, default='monthly')

    active = db.Column(db.Boolean, nullable=False, default=True)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime(timezone=True), default=utc_now, nullable=False)

    account = db.relationship('Account')
    movements = db.relationship('Movement', backref='budget_line', lazy=True)
