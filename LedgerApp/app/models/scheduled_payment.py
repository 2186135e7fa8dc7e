from LedgerApp.app.accounting_db import db

class ScheduledPayment(db.Model):
    __tablename__ = 'scheduled_payments'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)

    kind = db.Column(db.String(10), nullable=False)  # 'income' | 'expense'
    scheduled_date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    state = db.Column(db.String(20), nullable=False, default='pending')  # pending, paid, cancelled
    description = db.Column(db.String(200))
