from app.database.models.user_model import User
from app.database.models.center_model import Center
from app.database.models.member_model import Member
from app.database.models.loan_model import Loan
