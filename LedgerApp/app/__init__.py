from flask import Flask
from flask_sqlalchemy import SQLAlchemy

app = Flask(__name__)
app.config.from_prefixed_env() #get config data from environment variables beginning with "FLASK_"

# Defaults for anything not supplied through the environment
app.config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///accounting.db')
app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
app.config.setdefault('LEDGER_PAGE_SIZE', 1000)
app.config.setdefault('LEDGER_LOG_LEVEL', 'DEBUG')

db = SQLAlchemy(app)

# Import models so create_all sees them
from LedgerApp.app import accounting_db
