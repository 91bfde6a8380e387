from enum import Enum

class AccountType(str, Enum):
    checking = "checking"
    savings = "savings"
    investment = "investment"
    depository = "depository"
    credit = "credit"
    loan = "loan"
    other = "other"

class ChartType(str, Enum):
    net_worth = "net_worth"
