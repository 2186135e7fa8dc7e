from LedgerApp.app.accounting_db import db

class Account(db.Model):
    __tablename__ = 'accounts'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)

    code = db.Column(db.String(15), nullable=False)  # AAA-BBB-CCC-DDD
    name = db.Column(db.String(200), nullable=False)
    nature = db.Column(db.String(10), nullable=False, default='debit')  # 'debit' | 'credit'
    classification = db.Column(db.String(10), nullable=False, default='posting')  # 'header' | 'posting'
    level = db.Column(db.Integer, nullable=False, default=1)
    parent_code = db.Column(db.String(15))
    active = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.UniqueConstraint("company_id", "code", name="_account_company_code_uc"),
    )

    company = db.relationship(
        'Company',
        back_populates='accounts',
    )

    movements = db.relationship('Movement', backref='account', lazy=True)
