import os
import sys

import pandas as pd
from LedgerApp.app import app, db
from LedgerApp.app.accounting_db import Company, Account
from LedgerApp.app.services.chart_of_accounts import derive_level, derive_parent_code, is_debit_normal, normalize_code
from LedgerApp.app.services.records import AccountRecord, HEADER, POSTING
import LedgerApp.app.common as common

REQUIRED_COLUMNS = ["code", "name"]


def read_accounts_csv(csv_path):
    """
    Chart of accounts CSV -> DataFrame with normalized code, level, parent, nature and classification.
    Only 'code' and 'name' are required; 'nature' and 'classification' are derived when absent.
    """
    df = pd.read_csv(csv_path, dtype=str)
    df.columns = [str(c).strip().lower() for c in df.columns]

    for col in REQUIRED_COLUMNS:
        if col not in df.columns:
            raise ValueError(f"Missing required column '{col}' in CSV")

    df = df[df["code"].notna() & df["name"].notna()].copy()
    df["code"] = df["code"].apply(normalize_code)
    df["name"] = df["name"].str.strip()
    df = df.drop_duplicates(subset=["code"], keep="first")

    df["level"] = df["code"].apply(derive_level)
    df["parent_code"] = df["code"].apply(derive_parent_code)

    if "nature" not in df.columns:
        df["nature"] = None
    df["nature"] = [
        "debit" if is_debit_normal(AccountRecord(id=0, code=code, name="", nature=nature if pd.notna(nature) else None)) else "credit"
        for code, nature in zip(df["code"], df["nature"])
    ]

    # an account is a header when some other row names it as parent
    parents = set(df["parent_code"].dropna())
    if "classification" not in df.columns:
        df["classification"] = None
    df["classification"] = [
        str(c).strip().lower() if pd.notna(c) and str(c).strip().lower() in (HEADER, POSTING)
        else (HEADER if code in parents else POSTING)
        for code, c in zip(df["code"], df["classification"])
    ]

    return df.sort_values("code").reset_index(drop=True)


def import_accounts(csv_path, company_name, rfc=None):
    common.logger.debug(f"PWD = {os.getcwd()}")
    df = read_accounts_csv(csv_path)

    # Look for existing company
    company = Company.query.filter_by(name=company_name).first()
    if not company:
        company = Company(name=company_name, rfc=rfc)
        db.session.add(company)
        db.session.commit()

    existing = {a.code: a for a in Account.query.filter_by(company_id=company.id).all()}

    created = 0
    updated = 0
    for _, row in df.iterrows():
        account = existing.get(row["code"])
        if account is None:
            account = Account(company_id=company.id, code=row["code"])
            db.session.add(account)
            existing[row["code"]] = account
            created += 1
        else:
            updated += 1

        account.name = row["name"]
        account.nature = row["nature"]
        account.classification = row["classification"]
        account.level = int(row["level"])
        account.parent_code = row["parent_code"]

    db.session.commit()

    common.logger.debug(f"Imported accounts for {company_name}: {created} created, {updated} updated")
    return {"company_id": company.id, "created": created, "updated": updated}


if __name__ == "__main__":
    # python -m LedgerApp.app.import_accounts <csv> <company name>
    # Run inside Flask app context
    with app.app_context():
        import_accounts(sys.argv[1], sys.argv[2])
