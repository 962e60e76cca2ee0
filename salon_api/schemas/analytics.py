from datetime import date
from typing import Optional

from pydantic import BaseModel

from salon_api.schemas.transaction import TransactionOut


class DashboardOut(BaseModel):
    todayRevenue: float
    todayServices: int
    weekRevenue: float
    monthRevenue: float
    activeSalons: int
    activeHairdressers: int


class DailyRevenuePointOut(BaseModel):
    date: str
    label: str
    revenue: float
    count: int


class SalonRevenueOut(BaseModel):
    id: str
    name: str
    revenue: float
    count: int


class TopHairdresserOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    revenue: float
    count: int


class ServiceBreakdownOut(BaseModel):
    service_name: str
    count: int
    revenue: float


class PaymentMethodStatOut(BaseModel):
    count: int
    total: float


class PayrollHairdresserOut(BaseModel):
    id: str
    first_name: str
    last_name: str


class PayrollLineOut(BaseModel):
    hairdresser: PayrollHairdresserOut
    transactionCount: int
    totalSalon: float
    totalCoiffeur: float
    fixedSalary: float
    totalEarnings: float


class EarningsPointOut(BaseModel):
    label: str
    earnings: float
    services: int


class HairdresserStatsOut(BaseModel):
    todayEarnings: float
    todayServices: int
    weekEarnings: float
    weekServices: int
    monthEarnings: float
    monthServices: int
    weeklyData: list[EarningsPointOut]
    recentTransactions: list[TransactionOut]


class MonthlyCostsOut(BaseModel):
    month: str
    salon_id: Optional[str] = None
    fixed_total: float
    variable_total: float
    total: float
    reference_date: date
