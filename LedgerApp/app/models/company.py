from LedgerApp.app.accounting_db import db

class Company(db.Model):
    __tablename__ = 'companies'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    rfc = db.Column(db.String(13))  # tax id
    active = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.UniqueConstraint("name", name="_company_name_uc"),
    )

    accounts = db.relationship(
        'Account',
        back_populates='company',
        lazy=True,
        cascade='all, delete-orphan',
    )
