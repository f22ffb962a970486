from sqlalchemy import Boolean, Column, Integer, String
from app.models.base import Base, TimestampMixin


class AppSetting(Base, TimestampMixin):
    __tablename__ = 'app_settings'

    id = Column(Integer, primary_key=True)
    setting_name = Column(String(100), unique=True, nullable=False, index=True)
    setting_value = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<AppSetting {self.setting_name}={self.setting_value}>"
