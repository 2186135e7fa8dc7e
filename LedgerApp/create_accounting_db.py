from LedgerApp.app import db, accounting_db, app
import LedgerApp.app.common as common


def create_accounting_db(drop=False):
	with app.app_context():
		if drop:
			db.drop_all()
		db.create_all()
		common.logger.info(f"Ledger tables ready on {app.config['SQLALCHEMY_DATABASE_URI']}")


if __name__ == "__main__":
	create_accounting_db()
