from salon_api.models.salon import Salon
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.user import User
from salon_api.models.service import Service
from salon_api.models.product import Product, ProductCategory, ProductStock, StockMovement
from salon_api.models.assignment import Assignment
from salon_api.models.presence import Presence
from salon_api.models.service_history import ServiceHistory
from salon_api.models.expense import Expense, FixedExpense, FixedExpenseAmount
from salon_api.models.payroll import SalaryCost, SalaryPayment
