from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import BigInteger, String, TIMESTAMP, Index, text
from sqlalchemy.dialects.postgresql import JSONB

class Base(DeclarativeBase):
    pass

class Measurement(Base):
    __tablename__ = "measurements"
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(String(64), index=True)
    dev_eui: Mapped[str | None] = mapped_column(String(16), index=True, nullable=True)
    ts: Mapped[str] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"), index=True)
    values: Mapped[dict] = mapped_column(JSONB)   # everything in the value map except "time"
    topic: Mapped[str | None] = mapped_column(String(255), nullable=True)

Index("ix_measurements_device_ts_desc", Measurement.device_id, Measurement.ts.desc())
