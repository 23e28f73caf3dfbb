from sqlalchemy import DateTime, Float, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class OAuthToken(Base):
    __tablename__ = "oauth_tokens"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)  # Yahoo GUID

    # both tokens are Fernet-encrypted
    access_token: Mapped[str] = mapped_column(Text)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_in: Mapped[int | None] = mapped_column(Integer, nullable=True)
    token_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now())


class User(Base):
    __tablename__ = "users"
    guid: Mapped[str] = mapped_column(String(64), primary_key=True)
    nickname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)


class League(Base):
    __tablename__ = "leagues"
    league_key: Mapped[str] = mapped_column(String(64), primary_key=True)  # e.g. 458.l.12345
    name: Mapped[str] = mapped_column(String(255))
    season: Mapped[str | None] = mapped_column(String(8), nullable=True)
    game_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    current_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_synced: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), nullable=True)


class Team(Base):
    __tablename__ = "teams"
    team_key: Mapped[str] = mapped_column(String(64), primary_key=True)  # e.g. 458.l.12345.t.3
    league_key: Mapped[str] = mapped_column(String(64), index=True)
    team_id: Mapped[str | None] = mapped_column(String(16), nullable=True)
    name: Mapped[str] = mapped_column(String(255))
    manager_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)


class WeeklyStats(Base):
    """Cached power index for one team in one scoring week."""

    __tablename__ = "weekly_stats"
    __table_args__ = (
        UniqueConstraint("team_key", "league_key", "week", "year", name="uq_weekly_stats_team_period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_key: Mapped[str] = mapped_column(String(64), index=True)
    league_key: Mapped[str] = mapped_column(String(64), index=True)
    week: Mapped[int] = mapped_column(Integer)
    year: Mapped[int] = mapped_column(Integer)
    position: Mapped[int] = mapped_column(Integer)  # rank order within the computed list
    stats: Mapped[str] = mapped_column(Text)  # JSON {stat_id: raw value}
    breakdown: Mapped[str] = mapped_column(Text)  # JSON [{opponent, score}]
    categories: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON [{stat_id, name, polarity}]
    power_index: Mapped[float] = mapped_column(Float)
    calculated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), server_default=func.now())
