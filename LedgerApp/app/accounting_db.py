from . import db  # import the db object from __init__.py

from LedgerApp.app.models.company import Company
from LedgerApp.app.models.account import Account
from LedgerApp.app.models.journal_entry import JournalEntry
from LedgerApp.app.models.movement import Movement
from LedgerApp.app.models.budget_line import BudgetLine
from LedgerApp.app.models.scheduled_payment import ScheduledPayment
from LedgerApp.app.models.company_sequence import CompanySequence
