from pydantic import ConfigDict
from sqlmodel import SQLModel


class DashboardStat(SQLModel):
    """
    One tile on the admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    label: str
    value: int
    icon: str


class DashboardStats(SQLModel):
    model_config = ConfigDict(extra="forbid")

    stats: list[DashboardStat]
